"""Data access helpers for users and follow edges."""
from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from chirpline.core.identity import Authenticated, IdentityContext, resolve_identity
from chirpline.models.user import Follow, User
from chirpline.repositories.base import store_errors
from chirpline.schemas.user import UserSummary

__all__ = ["UserRepository", "UserResolver"]


class UserResolver(Protocol):
    """Resolves user ids into viewer-annotated summaries."""

    async def find_by_ids(
        self,
        user_ids: Sequence[int],
        viewer: IdentityContext | None,
        skip: int | None = None,
        limit: int | None = None,
    ) -> list[UserSummary]: ...


class UserRepository:
    """Thin wrapper around database access for user entities."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with an async SQLAlchemy session."""
        self.session = session

    async def get_by_id(self, user_id: int) -> User | None:
        """Return a user by identifier."""
        with store_errors("UserRepository", "get_by_id"):
            result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    async def exists(self, user_id: int) -> bool:
        """Return True if a user with ``user_id`` exists."""
        with store_errors("UserRepository", "exists"):
            result = await self.session.execute(select(exists().where(User.id == user_id)))
        return bool(result.scalar())

    async def create(self, *, username: str, display_name: str | None = None) -> User:
        """Insert a user profile and return the persisted instance."""
        user = User(username=username, display_name=display_name)
        with store_errors("UserRepository", "create"):
            self.session.add(user)
            await self.session.flush()
        return user

    async def find_by_ids(
        self,
        user_ids: Sequence[int],
        viewer: IdentityContext | None,
        skip: int | None = None,
        limit: int | None = None,
    ) -> list[UserSummary]:
        """Return summaries for ``user_ids`` in the order they were given.

        Ids that no longer resolve to a user are dropped before ``skip`` and
        ``limit`` are applied, so a deleted account never leaves a gap in a page.
        """
        wanted = list(dict.fromkeys(user_ids))
        if not wanted:
            return []
        with store_errors("UserRepository", "find_by_ids"):
            result = await self.session.execute(select(User).where(User.id.in_(wanted)))
        by_id = {user.id: user for user in result.scalars()}
        ordered = [by_id[user_id] for user_id in wanted if user_id in by_id]

        start = skip or 0
        end = start + limit if limit is not None else None
        page = ordered[start:end]

        resolved = await resolve_identity(viewer)
        viewer_id = resolved.user_id if isinstance(resolved, Authenticated) else None
        followed: set[int] = set()
        if viewer_id is not None and page:
            followed = await self._followed_among(viewer_id, [user.id for user in page])

        return [
            UserSummary(
                id=user.id,
                username=user.username,
                display_name=user.display_name,
                is_self=user.id == viewer_id,
                is_followed=user.id in followed,
            )
            for user in page
        ]

    async def follow(self, follower_id: int, followee_id: int) -> bool:
        """Create a follow edge. Returns False if it already existed."""
        if await self._follow_exists(follower_id, followee_id):
            return False
        with store_errors("UserRepository", "follow"):
            self.session.add(Follow(follower_id=follower_id, followee_id=followee_id))
            await self.session.flush()
        return True

    async def unfollow(self, follower_id: int, followee_id: int) -> bool:
        """Remove a follow edge. Returns False if there was none."""
        stmt = delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.followee_id == followee_id,
        )
        with store_errors("UserRepository", "unfollow"):
            result = await self.session.execute(stmt)
        return bool(result.rowcount)

    async def followee_ids(self, follower_id: int) -> list[int]:
        """Return ids of the users ``follower_id`` follows."""
        stmt = (
            select(Follow.followee_id)
            .where(Follow.follower_id == follower_id)
            .order_by(Follow.created_at)
        )
        with store_errors("UserRepository", "followee_ids"):
            result = await self.session.execute(stmt)
        return list(result.scalars())

    async def _follow_exists(self, follower_id: int, followee_id: int) -> bool:
        stmt = select(
            exists().where(
                Follow.follower_id == follower_id,
                Follow.followee_id == followee_id,
            )
        )
        with store_errors("UserRepository", "follow_exists"):
            result = await self.session.execute(stmt)
        return bool(result.scalar())

    async def _followed_among(self, follower_id: int, user_ids: Sequence[int]) -> set[int]:
        stmt = select(Follow.followee_id).where(
            Follow.follower_id == follower_id,
            Follow.followee_id.in_(list(user_ids)),
        )
        with store_errors("UserRepository", "followed_among"):
            result = await self.session.execute(stmt)
        return set(result.scalars())
