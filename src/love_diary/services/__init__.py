# src/love_diary/services/__init__.py
"""Business logic services for the Love Diary API."""

from .agent import AgentServiceClient, AgentServiceError
from .nonce import NonceService
from .ownership import OwnershipGuard
from .session import SessionService
from .siwe import ChallengeVerifier

__all__ = [
    "AgentServiceClient",
    "AgentServiceError",
    "ChallengeVerifier",
    "NonceService",
    "OwnershipGuard",
    "SessionService",
]
