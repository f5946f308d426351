"""Key-value store used for nonces, sessions and the ownership cache.

Every logical operation maps to a single store command, so no in-process
locking is required. The process keeps one lazily created store handle; call
``init_store``/``close_store`` for deterministic startup and teardown, or
``set_store`` to inject a replacement (tests).
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from love_diary.core.settings import settings

logger = logging.getLogger(__name__)

# Raised when the backing store cannot be reached or fails a command
STORE_ERRORS: tuple[type[Exception], ...] = (RedisError, OSError)


class KeyValueStore(Protocol):
    """Subset of key-value operations the auth core relies on."""

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store ``value`` under ``key`` expiring after ``ttl_seconds``."""

    async def get(self, key: str) -> str | None:
        """Return the value for ``key`` or None when absent or expired."""

    async def exists(self, key: str) -> bool:
        """Return True if ``key`` is present."""

    async def delete(self, key: str) -> None:
        """Remove ``key``; deleting an absent key is not an error."""

    async def swap(self, key: str, value: str) -> str | None:
        """Atomically replace an existing value, keeping its TTL.

        Returns the previous value, or None (without writing) when the key is
        absent.
        """

    async def close(self) -> None:
        """Release underlying connections."""


class RedisStore:
    """Store backed by a pooled ``redis.asyncio`` client."""

    def __init__(self, url: str) -> None:
        self._url = url
        self._client: redis.Redis | None = None

    def _ensure_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(self._url, decode_responses=True)
        return self._client

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._ensure_client().set(key, value, ex=max(1, int(ttl_seconds)))

    async def get(self, key: str) -> str | None:
        value = await self._ensure_client().get(key)
        return value if value else None

    async def exists(self, key: str) -> bool:
        return bool(await self._ensure_client().exists(key))

    async def delete(self, key: str) -> None:
        await self._ensure_client().delete(key)

    async def swap(self, key: str, value: str) -> str | None:
        # SET ... XX KEEPTTL GET is a single command: only existing keys are
        # written and the old value comes back in the same round trip.
        previous = await self._ensure_client().set(
            key, value, xx=True, keepttl=True, get=True
        )
        return previous if previous else None

    async def ping(self) -> bool:
        return bool(await self._ensure_client().ping())

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class MemoryStore:
    """In-process store with TTL semantics for local runs and tests."""

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.monotonic
        self._data: dict[str, tuple[str, float]] = {}

    def _live(self, key: str) -> tuple[str, float] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry[1] <= self._clock():
            self._data.pop(key, None)
            return None
        return entry

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._data[key] = (value, self._clock() + max(1, int(ttl_seconds)))

    async def get(self, key: str) -> str | None:
        entry = self._live(key)
        return entry[0] if entry else None

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def swap(self, key: str, value: str) -> str | None:
        entry = self._live(key)
        if entry is None:
            return None
        self._data[key] = (value, entry[1])
        return entry[0]

    def ttl(self, key: str) -> float | None:
        """Return remaining lifetime in seconds, or None when absent."""
        entry = self._live(key)
        return None if entry is None else entry[1] - self._clock()

    async def close(self) -> None:
        self._data.clear()


_store: KeyValueStore | None = None


def _build_store() -> KeyValueStore:
    if settings.uses_memory_store:
        logger.warning("Using in-process key-value store; state is not shared")
        return MemoryStore()
    return RedisStore(settings.redis_url)


def get_store() -> KeyValueStore:
    """Return the process-wide store, creating it on first use."""
    global _store
    if _store is None:
        _store = _build_store()
    return _store


def set_store(store: KeyValueStore | None) -> None:
    """Replace the process-wide store (None resets to lazy creation)."""
    global _store
    _store = store


async def init_store() -> KeyValueStore:
    """Create the store and verify connectivity.

    A refused connection here is fatal; the app should not start without its
    nonce and session store.
    """
    store = get_store()
    if isinstance(store, RedisStore):
        await store.ping()
        logger.info("Connected to key-value store")
    return store


async def close_store() -> None:
    """Close and forget the process-wide store."""
    global _store
    if _store is not None:
        await _store.close()
        _store = None
