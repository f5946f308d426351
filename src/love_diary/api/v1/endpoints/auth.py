"""Wallet sign-in endpoints (Sign-In with Ethereum)."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, HTTPException, status

from love_diary.api.v1.dependencies import (
    AuthorizationHeader,
    ChallengeVerifierDep,
    NonceServiceDep,
    SessionServiceDep,
)
from love_diary.schemas.auth import (
    LogoutResponse,
    NonceResponse,
    SignInRequest,
    SignInResponse,
)
from love_diary.services.session import extract_bearer_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.get("/nonce", summary="Issue a sign-in nonce", response_model=NonceResponse)
async def issue_nonce(nonce_service: NonceServiceDep) -> NonceResponse:
    """Create a single-use nonce the wallet must embed in its SIWE message."""
    try:
        nonce = await nonce_service.issue_nonce()
    except Exception as err:
        logger.exception("Nonce generation failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate nonce",
        ) from err
    return NonceResponse(nonce=nonce)


@router.post("/signin", summary="Sign in with a signed SIWE message", response_model=SignInResponse)
async def sign_in(
    payload: SignInRequest,
    verifier: ChallengeVerifierDep,
    sessions: SessionServiceDep,
) -> SignInResponse:
    """Verify the signed message and issue a session token."""
    try:
        result = await verifier.verify_challenge(payload.message, payload.signature)
        if not result.valid or result.address is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=result.error or "Invalid signature",
            )

        if result.address.lower() != payload.address.lower():
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Address mismatch",
            )

        token = await sessions.create_session(result.address)
    except HTTPException:
        raise
    except Exception as err:
        logger.exception("Sign-in failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed",
        ) from err

    logger.info("Wallet %s signed in", result.address)
    return SignInResponse(
        token=token,
        expires_at=int(time.time()) + sessions.ttl_seconds,
        address=result.address,
    )


@router.post("/logout", summary="Revoke the current session", response_model=LogoutResponse)
async def logout(
    sessions: SessionServiceDep,
    authorization: AuthorizationHeader = None,
) -> LogoutResponse:
    """Remove the bearer token from the session store."""
    token = extract_bearer_token(authorization)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No token provided",
        )

    try:
        await sessions.invalidate_session(token)
    except Exception as err:
        logger.exception("Logout failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Logout failed",
        ) from err

    return LogoutResponse(success=True)
