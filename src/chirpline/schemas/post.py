# src/chirpline/schemas/post.py
"""Post-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from chirpline.schemas.user import UserSummary


class PostCreate(BaseModel):
    """Schema for creating a new post or repost."""

    body: str = Field("", max_length=280, description="Text content")
    repost_target_id: int | None = Field(None, description="Post being reposted, if any")


class PostUpdate(BaseModel):
    """Schema for editing the body of an existing post."""

    body: str = Field(..., max_length=280, description="Replacement text content")


class PostResponse(BaseModel):
    """Stored post as returned by write operations such as like/unlike."""

    id: int
    author_id: int
    body: str
    repost_target_id: int | None
    liker_ids: list[int]
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class EnrichedPost(PostResponse):
    """Request-scoped view of a post with derived, viewer-relative fields.

    Built fresh for every request; never written back to the store.
    ``repost_target`` is ``None`` both for plain posts and for reposts whose
    target was deleted or cut off by the recursion guard; ``repost_target_id``
    tells the two apart.
    """

    likes_count: int = 0
    reposts_count: int = 0
    likers: list[UserSummary] = Field(default_factory=list)
    is_liked: bool = False
    is_reposted: bool = False
    repost_target: EnrichedPost | None = None

    model_config = ConfigDict(from_attributes=False)
