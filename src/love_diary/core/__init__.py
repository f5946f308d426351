"""Core configuration for the Love Diary API."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
