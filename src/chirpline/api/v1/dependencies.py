"""Shared API dependencies for identity, stores and the feed service."""

from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from chirpline.core.identity import ANONYMOUS, IdentityContext, require_user_id
from chirpline.core.security import BearerIdentity
from chirpline.core.settings import settings
from chirpline.db.session import get_session
from chirpline.repositories.post_repo import PostRepository
from chirpline.repositories.user_repo import UserRepository
from chirpline.services.enrichment import FeedEnricher
from chirpline.services.feed_service import FeedService

# Anonymous requests are allowed; routes that need a user depend on CurrentUserIdDep.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_post_repository(session: SessionDep) -> PostRepository:
    """Return a post store bound to the request session."""
    return PostRepository(session)


def get_user_repository(session: SessionDep) -> UserRepository:
    """Return a user store bound to the request session."""
    return UserRepository(session)


PostRepositoryDep = Annotated[PostRepository, Depends(get_post_repository)]
UserRepositoryDep = Annotated[UserRepository, Depends(get_user_repository)]


def get_feed_service(posts: PostRepositoryDep, users: UserRepositoryDep) -> FeedService:
    """Wire the feed service with limits taken from settings."""
    enricher = FeedEnricher(
        posts,
        users,
        likers_preview=settings.feed_likers_preview,
        max_repost_depth=settings.feed_repost_max_depth,
        max_concurrency=settings.feed_enrich_concurrency,
    )
    return FeedService(posts, users, enricher)


def get_viewer(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    users: UserRepositoryDep,
) -> IdentityContext:
    """Return the identity of the requester.

    The bearer token, if any, is only verified when something first asks
    whether the viewer is authenticated.
    """
    if credentials is None:
        return ANONYMOUS
    return BearerIdentity(credentials.credentials, users.exists)


ViewerDep = Annotated[IdentityContext, Depends(get_viewer)]


async def get_current_user_id(viewer: ViewerDep) -> int:
    """Return the authenticated user id or fail with UnauthorizedError."""
    return await require_user_id(viewer)


CurrentUserIdDep = Annotated[int, Depends(get_current_user_id)]
FeedServiceDep = Annotated[FeedService, Depends(get_feed_service)]


class Page:
    """Query parameters for offset pagination with configured defaults."""

    def __init__(
        self,
        skip: int = Query(0, ge=0, description="Number of items to skip"),
        limit: int = Query(
            settings.feed_default_limit,
            ge=1,
            le=settings.feed_max_limit,
            description="Maximum number of items to return",
        ),
    ) -> None:
        self.skip = skip
        self.limit = limit


PageDep = Annotated[Page, Depends(Page)]
