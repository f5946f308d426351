"""Request authorization with cached on-chain character ownership.

The guard validates the caller's session and, for character-scoped requests,
confirms the session wallet owns the character NFT. Owners are cached for
``OWNERSHIP_CACHE_TTL_SECONDS``; transfers inside that window are not seen
until the entry expires.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Final

from love_diary.core.settings import settings
from love_diary.db.store import KeyValueStore
from love_diary.services.session import SessionService, extract_bearer_token

logger = logging.getLogger(__name__)

MISSING_TOKEN: Final[str] = "Missing authorization token"
NOT_OWNER: Final[str] = "You do not own this character"

OwnerReader = Callable[[int], Awaitable[str]]


def owner_cache_key(token_id: int) -> str:
    return f"nft:{token_id}:owner"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of authorizing a request."""

    authenticated: bool
    wallet_address: str | None = None
    error: str | None = None


class OwnershipGuard:
    """Authorize requests by session and, optionally, character ownership."""

    def __init__(
        self,
        store: KeyValueStore,
        sessions: SessionService,
        *,
        cache_ttl_seconds: int | None = None,
        read_timeout_seconds: float | None = None,
    ) -> None:
        self._store = store
        self._sessions = sessions
        self._cache_ttl_seconds = cache_ttl_seconds or settings.ownership_cache_ttl_seconds
        self._read_timeout_seconds = read_timeout_seconds or settings.chain_read_timeout_seconds

    async def verify_ownership(
        self, token_id: int, wallet_address: str, read_owner: OwnerReader
    ) -> bool:
        """Return True if ``wallet_address`` owns ``token_id``.

        A cached owner is authoritative while it lives. On a miss the chain is
        read once; read failures deny access and are not cached.
        """
        cache_key = owner_cache_key(token_id)
        cached = await self._store.get(cache_key)
        if cached:
            return cached.lower() == wallet_address.lower()

        try:
            owner = await asyncio.wait_for(read_owner(token_id), self._read_timeout_seconds)
        except Exception:
            logger.exception("Failed to verify ownership of character %s", token_id)
            return False

        if not owner:
            logger.error("Empty owner returned for character %s", token_id)
            return False

        await self._store.set(cache_key, owner, self._cache_ttl_seconds)
        return owner.lower() == wallet_address.lower()

    async def authorize(
        self,
        auth_header: str | None,
        resource_id: int | None = None,
        read_owner: OwnerReader | None = None,
    ) -> AuthResult:
        """Authenticate the bearer session and check ownership if scoped."""
        token = extract_bearer_token(auth_header)
        if token is None:
            return AuthResult(authenticated=False, error=MISSING_TOKEN)

        check = await self._sessions.validate_session(token)
        if not check.valid or check.wallet_address is None:
            return AuthResult(authenticated=False, error=check.error or "Invalid token")

        if resource_id is not None and read_owner is not None:
            if not await self.verify_ownership(resource_id, check.wallet_address, read_owner):
                return AuthResult(authenticated=False, error=NOT_OWNER)

        return AuthResult(authenticated=True, wallet_address=check.wallet_address)
