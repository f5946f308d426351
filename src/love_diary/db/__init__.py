# src/love_diary/db/__init__.py
"""Key-value store configuration and utilities."""

from .store import KeyValueStore, MemoryStore, RedisStore, close_store, get_store, init_store, set_store

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "RedisStore",
    "close_store",
    "get_store",
    "init_store",
    "set_store",
]
