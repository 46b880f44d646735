# src/chirpline/schemas/user.py
"""User-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class UserSummary(BaseModel):
    """Public user profile annotated relative to the viewing identity."""

    id: int
    username: str
    display_name: str | None = None
    is_self: bool = Field(False, description="True if this user is the viewer")
    is_followed: bool = Field(False, description="True if the viewer follows this user")

    model_config = ConfigDict(from_attributes=True)


class FollowResponse(BaseModel):
    """Result of a follow or unfollow request."""

    followee_id: int
    following: bool
