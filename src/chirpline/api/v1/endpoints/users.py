# src/chirpline/api/v1/endpoints/users.py
"""Follow endpoints for the Chirpline API."""

from fastapi import APIRouter

from chirpline.api.v1.dependencies import CurrentUserIdDep, FeedServiceDep
from chirpline.schemas.user import FollowResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/{user_id}/follow", response_model=FollowResponse)
async def follow_user(
    user_id: int,
    service: FeedServiceDep,
    current_user_id: CurrentUserIdDep,
) -> FollowResponse:
    """Follow another user. Following twice has no further effect."""
    await service.follow(current_user_id, user_id)
    return FollowResponse(followee_id=user_id, following=True)


@router.delete("/{user_id}/follow", response_model=FollowResponse)
async def unfollow_user(
    user_id: int,
    service: FeedServiceDep,
    current_user_id: CurrentUserIdDep,
) -> FollowResponse:
    """Stop following a user."""
    await service.unfollow(current_user_id, user_id)
    return FollowResponse(followee_id=user_id, following=False)
