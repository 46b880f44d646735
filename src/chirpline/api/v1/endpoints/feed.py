# src/chirpline/api/v1/endpoints/feed.py
"""Timeline endpoints for the Chirpline API."""

from fastapi import APIRouter, Query

from chirpline.api.v1.dependencies import CurrentUserIdDep, FeedServiceDep, PageDep, ViewerDep
from chirpline.core.identity import Authenticated
from chirpline.schemas.post import EnrichedPost

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("/authors", response_model=list[EnrichedPost])
async def author_timeline(
    service: FeedServiceDep,
    viewer: ViewerDep,
    page: PageDep,
    author_id: list[int] = Query(..., description="Authors whose posts to include"),
) -> list[EnrichedPost]:
    """List posts by the given authors, newest first."""
    return await service.timeline_for_authors(author_id, viewer, page.skip, page.limit)


@router.get("/home", response_model=list[EnrichedPost])
async def home_timeline(
    service: FeedServiceDep,
    user_id: CurrentUserIdDep,
    page: PageDep,
) -> list[EnrichedPost]:
    """List posts by the current user and the accounts they follow."""
    return await service.home_timeline(Authenticated(user_id), page.skip, page.limit)
