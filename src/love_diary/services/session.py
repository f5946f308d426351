"""Revocable bearer sessions backed by signed JWTs.

A session token is an HS256 JWT carrying ``walletAddress``, ``iat``, ``exp``
and a random ``jti``, so two sign-ins never share a token. The token is also
recorded in the key-value store; a token counts as valid only while that
record exists, which lets logout revoke a token before its embedded expiry.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Final

from jose import JWTError, jwt

from love_diary.core.settings import settings
from love_diary.db.store import KeyValueStore

logger = logging.getLogger(__name__)

SESSION_INVALID: Final[str] = "Session expired or invalid"
WALLET_CLAIM: Final[str] = "walletAddress"


def session_key(token: str) -> str:
    return f"session:{token}"


def extract_bearer_token(header: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header.

    Any other scheme or shape yields None.
    """
    if not header:
        return None
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        return None
    return parts[1]


@dataclass(frozen=True)
class SessionCheck:
    """Outcome of validating a session token."""

    valid: bool
    wallet_address: str | None = None
    error: str | None = None


class SessionService:
    """Mint, validate and revoke session tokens."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        secret: str | None = None,
        algorithm: str | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        self._store = store
        self._secret = secret or settings.jwt_secret
        self._algorithm = algorithm or settings.jwt_algorithm
        self._ttl_seconds = ttl_seconds or settings.session_ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def _encode(self, wallet_address: str, issued_at: datetime) -> str:
        expires_at = issued_at + timedelta(seconds=self._ttl_seconds)
        claims: dict[str, object] = {
            WALLET_CLAIM: wallet_address,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }
        encoded: str = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        return encoded

    async def create_session(self, wallet_address: str) -> str:
        """Issue a token for ``wallet_address`` and record it in the store."""
        if not wallet_address:
            raise ValueError("wallet_address is required")

        token = self._encode(wallet_address, datetime.now(UTC))
        await self._store.set(session_key(token), wallet_address, self._ttl_seconds)
        return token

    async def validate_session(self, token: str) -> SessionCheck:
        """Check store membership, then signature and expiry."""
        if not token or not await self._store.exists(session_key(token)):
            return SessionCheck(valid=False, error=SESSION_INVALID)

        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as err:
            return SessionCheck(valid=False, error=str(err) or "Invalid token")

        wallet_address = payload.get(WALLET_CLAIM)
        if not isinstance(wallet_address, str) or not wallet_address:
            return SessionCheck(valid=False, error="Invalid token payload")

        return SessionCheck(valid=True, wallet_address=wallet_address)

    async def invalidate_session(self, token: str) -> None:
        """Revoke ``token``; revoking an unknown token is a no-op."""
        await self._store.delete(session_key(token))
