# src/chirpline/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .feed import router as feed_router
from .posts import router as posts_router
from .users import router as users_router

__all__ = [
    "feed_router",
    "posts_router",
    "users_router",
]
