# src/love_diary/schemas/__init__.py
"""
Pydantic schemas for API request/response models.
"""

from .agent import ChatInitRequest, ChatSendRequest, GiftRequest, ImageGenerationResponse
from .auth import LogoutResponse, NonceResponse, SignInRequest, SignInResponse

__all__ = [
    "ChatInitRequest", "ChatSendRequest", "GiftRequest", "ImageGenerationResponse",
    "LogoutResponse", "NonceResponse", "SignInRequest", "SignInResponse",
]
