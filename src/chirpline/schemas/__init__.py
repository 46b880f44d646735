# src/chirpline/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .post import EnrichedPost, PostCreate, PostResponse, PostUpdate
from .user import FollowResponse, UserSummary

__all__ = [
    "EnrichedPost", "PostCreate", "PostResponse", "PostUpdate",
    "FollowResponse", "UserSummary",
]
