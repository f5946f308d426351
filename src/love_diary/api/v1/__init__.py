"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    character_router,
    chat_router,
    diary_router,
    wallet_router,
)

__all__ = [
    "auth_router",
    "character_router",
    "chat_router",
    "diary_router",
    "wallet_router",
]
