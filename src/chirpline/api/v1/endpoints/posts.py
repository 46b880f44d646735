# src/chirpline/api/v1/endpoints/posts.py
"""Post-related endpoints for the Chirpline API."""

from fastapi import APIRouter, status

from chirpline.api.v1.dependencies import CurrentUserIdDep, FeedServiceDep, PageDep, ViewerDep
from chirpline.schemas.post import EnrichedPost, PostCreate, PostResponse, PostUpdate
from chirpline.schemas.user import UserSummary

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("/", response_model=EnrichedPost, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    service: FeedServiceDep,
    user_id: CurrentUserIdDep,
) -> EnrichedPost:
    """Create a post, or a repost when ``repost_target_id`` is set."""
    return await service.create_post(user_id, payload.body, payload.repost_target_id)


@router.get("/{post_id}", response_model=EnrichedPost)
async def get_post(post_id: int, service: FeedServiceDep, viewer: ViewerDep) -> EnrichedPost:
    """Get a single post with counts, viewer flags and its repost target."""
    return await service.get_post(post_id, viewer)


@router.patch("/{post_id}", response_model=EnrichedPost)
async def update_post(
    post_id: int,
    payload: PostUpdate,
    service: FeedServiceDep,
    user_id: CurrentUserIdDep,
) -> EnrichedPost:
    """Edit the body of one of the current user's posts."""
    return await service.update_post(post_id, user_id, payload.body)


@router.delete("/{post_id}", response_model=PostResponse)
async def delete_post(
    post_id: int,
    service: FeedServiceDep,
    user_id: CurrentUserIdDep,
) -> PostResponse:
    """Delete one of the current user's posts."""
    post = await service.delete_post(post_id, user_id)
    return PostResponse.model_validate(post)


@router.get("/{post_id}/reposts", response_model=list[EnrichedPost])
async def list_reposts(
    post_id: int,
    service: FeedServiceDep,
    viewer: ViewerDep,
    page: PageDep,
) -> list[EnrichedPost]:
    """List reposts of a post, newest first."""
    return await service.reposts_of(post_id, viewer, page.skip, page.limit)


@router.get("/{post_id}/likers", response_model=list[UserSummary])
async def list_likers(
    post_id: int,
    service: FeedServiceDep,
    viewer: ViewerDep,
    page: PageDep,
) -> list[UserSummary]:
    """List the users who liked a post, in the order they liked it."""
    post = await service.find_post(post_id)
    return await service.likers_of(post, viewer, page.skip, page.limit)


@router.post("/{post_id}/like", response_model=PostResponse)
async def like_post(
    post_id: int,
    service: FeedServiceDep,
    user_id: CurrentUserIdDep,
) -> PostResponse:
    """Like a post. Liking twice has no further effect."""
    post = await service.like(user_id, post_id)
    return PostResponse.model_validate(post)


@router.delete("/{post_id}/like", response_model=PostResponse)
async def unlike_post(
    post_id: int,
    service: FeedServiceDep,
    user_id: CurrentUserIdDep,
) -> PostResponse:
    """Remove a like. Unliking a post that was not liked has no effect."""
    post = await service.unlike(user_id, post_id)
    return PostResponse.model_validate(post)
