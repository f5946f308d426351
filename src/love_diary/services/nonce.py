"""One-time challenge nonces for wallet sign-in."""

from __future__ import annotations

import secrets
import string
from typing import Final

from love_diary.core.settings import settings
from love_diary.db.store import KeyValueStore

NONCE_LENGTH: Final[int] = 24
NONCE_PENDING: Final[str] = "pending"
NONCE_USED: Final[str] = "used"

# EIP-4361 nonces must be alphanumeric
_ALPHABET: Final[str] = string.ascii_letters + string.digits


def nonce_key(nonce: str) -> str:
    return f"nonce:{nonce}"


class NonceService:
    """Issue and consume single-use sign-in nonces."""

    def __init__(self, store: KeyValueStore, ttl_seconds: int | None = None) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds or settings.nonce_ttl_seconds

    @staticmethod
    def generate_nonce() -> str:
        """Return a random alphanumeric nonce."""
        return "".join(secrets.choice(_ALPHABET) for _ in range(NONCE_LENGTH))

    async def store_nonce(self, nonce: str) -> None:
        """Persist ``nonce`` as pending for the configured TTL."""
        await self._store.set(nonce_key(nonce), NONCE_PENDING, self._ttl_seconds)

    async def issue_nonce(self) -> str:
        """Generate and persist a fresh nonce."""
        nonce = self.generate_nonce()
        await self.store_nonce(nonce)
        return nonce

    async def verify_and_consume_nonce(self, nonce: str) -> bool:
        """Mark a pending nonce as used.

        Returns True exactly once per issued nonce. Unknown, expired and
        already consumed nonces return False. Store errors propagate.
        """
        if not nonce:
            return False
        previous = await self._store.swap(nonce_key(nonce), NONCE_USED)
        return previous == NONCE_PENDING
