"""Request schemas for character endpoints backed by the agent service."""

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ChatInitRequest(_CamelModel):
    """First-time chat setup for a bonded character."""

    token_id: int = Field(..., alias="tokenId", ge=0, description="Character NFT id")
    player_name: str = Field(..., alias="playerName", min_length=1)
    player_gender: str = Field(..., alias="playerGender", min_length=1)
    player_timezone: int = Field(..., alias="playerTimezone", description="UTC offset in hours")


class ChatSendRequest(_CamelModel):
    """Chat message from the player to a character."""

    token_id: int = Field(..., alias="tokenId", ge=0)
    message: str = Field(..., min_length=1)
    player_name: str = Field(..., alias="playerName", min_length=1)


class GiftRequest(_CamelModel):
    """LOVE token transfer the agent should verify."""

    tx_hash: str = Field(..., alias="txHash", min_length=1)
    amount: float = Field(..., gt=0)


class ImageGenerationResponse(BaseModel):
    success: bool = True
    message: str = "Image generation started in background"
