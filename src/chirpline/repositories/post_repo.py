"""Data access helpers for working with posts."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from sqlalchemy import delete, exists, func, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from chirpline.db.time import utcnow
from chirpline.models.post import Post, PostLike
from chirpline.repositories.base import paginate, store_errors

__all__ = ["PostRepository", "PostStore"]


class PostStore(Protocol):
    """Query surface over persisted posts consumed by the feed core.

    All finders return posts newest first. ``skip``/``limit`` are applied only
    when given.
    """

    async def create(
        self,
        *,
        author_id: int,
        body: str,
        repost_target_id: int | None = None,
        created_at: datetime | None = None,
    ) -> Post: ...

    async def update_body(self, post_id: int, body: str) -> Post | None: ...

    async def delete(self, post_id: int) -> Post | None: ...

    async def find_by_id(self, post_id: int) -> Post | None: ...

    async def find_by_author_ids(
        self,
        author_ids: Sequence[int],
        skip: int | None = None,
        limit: int | None = None,
    ) -> list[Post]: ...

    async def find_by_repost_target(
        self,
        post_id: int,
        skip: int | None = None,
        limit: int | None = None,
    ) -> list[Post]: ...

    async def count_by_repost_target(self, post_id: int) -> int: ...

    async def count_reposts_by_targets(self, post_ids: Sequence[int]) -> dict[int, int]: ...

    async def exists_repost_by_author_and_target(self, author_id: int, target_id: int) -> bool: ...

    async def reposted_target_ids(self, author_id: int, target_ids: Sequence[int]) -> set[int]: ...

    async def add_liker(self, post: Post, user_id: int) -> bool: ...

    async def remove_liker(self, post: Post, user_id: int) -> bool: ...


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with an async SQLAlchemy session."""
        self.session = session

    async def create(
        self,
        *,
        author_id: int,
        body: str,
        repost_target_id: int | None = None,
        created_at: datetime | None = None,
    ) -> Post:
        """Insert a new post and return the persisted ORM instance.

        Args:
            author_id: Identifier of the authoring user.
            body: Text content; may be empty for reposts.
            repost_target_id: Post being reposted, if any.
            created_at: Creation time override, used by imports and fixtures.
        """
        post = Post(
            author_id=author_id,
            body=body,
            repost_target_id=repost_target_id,
            created_at=created_at or utcnow(),
            likes=[],
        )
        with store_errors("PostRepository", "create"):
            self.session.add(post)
            await self.session.flush()
        return post

    async def update_body(self, post_id: int, body: str) -> Post | None:
        """Replace the body of a post; author and repost target never change."""
        post = await self.find_by_id(post_id)
        if post is None:
            return None
        post.body = body
        post.updated_at = utcnow()
        with store_errors("PostRepository", "update_body"):
            await self.session.flush()
        return post

    async def delete(self, post_id: int) -> Post | None:
        """Delete a post and its likes, returning the removed instance."""
        post = await self.find_by_id(post_id)
        if post is None:
            return None
        with store_errors("PostRepository", "delete"):
            await self.session.delete(post)
            await self.session.flush()
        return post

    async def find_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        with store_errors("PostRepository", "find_by_id"):
            result = await self.session.execute(select(Post).where(Post.id == post_id))
        return result.scalars().first()

    async def find_by_author_ids(
        self,
        author_ids: Sequence[int],
        skip: int | None = None,
        limit: int | None = None,
    ) -> list[Post]:
        """Return posts written by any of ``author_ids``, newest first."""
        if not author_ids:
            return []
        stmt = (
            select(Post)
            .where(Post.author_id.in_(list(author_ids)))
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        with store_errors("PostRepository", "find_by_author_ids"):
            result = await self.session.execute(paginate(stmt, skip, limit))
        return list(result.scalars())

    async def find_by_repost_target(
        self,
        post_id: int,
        skip: int | None = None,
        limit: int | None = None,
    ) -> list[Post]:
        """Return reposts of ``post_id``, newest first."""
        stmt = (
            select(Post)
            .where(Post.repost_target_id == post_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        with store_errors("PostRepository", "find_by_repost_target"):
            result = await self.session.execute(paginate(stmt, skip, limit))
        return list(result.scalars())

    async def count_by_repost_target(self, post_id: int) -> int:
        """Return how many posts repost ``post_id``."""
        stmt = select(func.count()).select_from(Post).where(Post.repost_target_id == post_id)
        with store_errors("PostRepository", "count_by_repost_target"):
            result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def count_reposts_by_targets(self, post_ids: Sequence[int]) -> dict[int, int]:
        """Return repost counts for many posts in one grouped query."""
        if not post_ids:
            return {}
        stmt = (
            select(Post.repost_target_id, func.count())
            .where(Post.repost_target_id.in_(list(post_ids)))
            .group_by(Post.repost_target_id)
        )
        with store_errors("PostRepository", "count_reposts_by_targets"):
            result = await self.session.execute(stmt)
        counts = {target_id: int(count) for target_id, count in result.all()}
        return {post_id: counts.get(post_id, 0) for post_id in post_ids}

    async def exists_repost_by_author_and_target(self, author_id: int, target_id: int) -> bool:
        """Return True if ``author_id`` has reposted ``target_id``."""
        stmt = select(
            exists().where(
                Post.repost_target_id == target_id,
                Post.author_id == author_id,
            )
        )
        with store_errors("PostRepository", "exists_repost_by_author_and_target"):
            result = await self.session.execute(stmt)
        return bool(result.scalar())

    async def reposted_target_ids(self, author_id: int, target_ids: Sequence[int]) -> set[int]:
        """Return the subset of ``target_ids`` that ``author_id`` has reposted."""
        if not target_ids:
            return set()
        stmt = (
            select(Post.repost_target_id)
            .where(
                Post.author_id == author_id,
                Post.repost_target_id.in_(list(target_ids)),
            )
            .distinct()
        )
        with store_errors("PostRepository", "reposted_target_ids"):
            result = await self.session.execute(stmt)
        return set(result.scalars())

    async def add_liker(self, post: Post, user_id: int) -> bool:
        """Add ``user_id`` to the likers of ``post``.

        Returns:
            True if a like was recorded, False if the user already liked it.
        """
        if user_id in post.liker_ids:
            return False
        with store_errors("PostRepository", "add_liker"):
            result = await self.session.execute(self._insert_like(post.id, user_id))
            await self.session.refresh(post, ["likes"])
        return bool(result.rowcount)

    async def remove_liker(self, post: Post, user_id: int) -> bool:
        """Remove ``user_id`` from the likers of ``post``.

        Returns:
            True if a like was removed, False if the user had not liked it.
        """
        stmt = delete(PostLike).where(
            PostLike.post_id == post.id,
            PostLike.user_id == user_id,
        )
        with store_errors("PostRepository", "remove_liker"):
            result = await self.session.execute(stmt)
            await self.session.refresh(post, ["likes"])
        return bool(result.rowcount)

    def _insert_like(self, post_id: int, user_id: int):  # type: ignore[no-untyped-def]
        # The unique (post_id, user_id) index settles concurrent likes; where the
        # dialect supports it the losing insert becomes a no-op.
        values = {"post_id": post_id, "user_id": user_id, "created_at": utcnow()}
        dialect = self.session.bind.dialect.name if self.session.bind is not None else ""
        if dialect == "postgresql":
            return pg_insert(PostLike.__table__).values(**values).on_conflict_do_nothing(
                index_elements=["post_id", "user_id"]
            )
        if dialect == "sqlite":
            return sqlite_insert(PostLike.__table__).values(**values).on_conflict_do_nothing(
                index_elements=["post_id", "user_id"]
            )
        return insert(PostLike.__table__).values(**values)
