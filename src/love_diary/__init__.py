"""Love Diary API: wallet sign-in and character services."""

__version__ = "0.1.0"
