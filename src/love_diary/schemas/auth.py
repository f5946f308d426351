"""Authentication request and response schemas."""

from pydantic import BaseModel, ConfigDict, Field


class NonceResponse(BaseModel):
    """Fresh sign-in nonce."""

    nonce: str = Field(..., description="Single-use nonce to embed in the SIWE message")


class SignInRequest(BaseModel):
    """Signed SIWE message submitted by the wallet."""

    message: str = Field(..., min_length=1, description="EIP-4361 message text")
    signature: str = Field(..., min_length=1, description="Hex EIP-191 signature")
    address: str = Field(..., min_length=1, description="Wallet address claimed by the client")


class SignInResponse(BaseModel):
    """Issued session."""

    token: str = Field(..., description="Bearer session token")
    expires_at: int = Field(..., alias="expiresAt", description="Unix expiry in seconds")
    address: str = Field(..., description="Verified wallet address")

    model_config = ConfigDict(populate_by_name=True)


class LogoutResponse(BaseModel):
    success: bool = True
