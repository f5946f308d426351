"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .character import router as character_router
from .chat import router as chat_router
from .diary import router as diary_router
from .wallet import router as wallet_router

__all__ = [
    "auth_router",
    "character_router",
    "chat_router",
    "diary_router",
    "wallet_router",
]
