# src/chirpline/models/__init__.py
"""SQLAlchemy models for the Chirpline application."""

from .post import Post, PostLike
from .user import Follow, User

__all__ = [
    "Follow",
    "Post", "PostLike",
    "User",
]
