"""Feed queries and post mutations composed over the stores and the enricher."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from chirpline.core.errors import (
    InvalidOperationError,
    PostNotFoundError,
    UnauthorizedError,
    UserNotFoundError,
    require_id,
)
from chirpline.core.identity import Authenticated, IdentityContext, require_user_id
from chirpline.models.post import Post
from chirpline.repositories.post_repo import PostStore
from chirpline.repositories.user_repo import UserRepository
from chirpline.schemas.post import EnrichedPost
from chirpline.schemas.user import UserSummary
from chirpline.services.enrichment import FeedEnricher

__all__ = ["FeedService"]

logger = logging.getLogger(__name__)


def _check_page(skip: int | None, limit: int | None) -> None:
    for name, value in (("skip", skip), ("limit", limit)):
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidOperationError(f"{name} must be a non-negative integer, got {value!r}")


class FeedService:
    """Author-scoped and repost-scoped feeds plus like/unlike and post edits.

    ``skip`` and ``limit`` are applied only when given; default page sizes
    belong to the caller. Pagination always happens in the store, before
    enrichment.
    """

    def __init__(
        self,
        posts: PostStore,
        users: UserRepository,
        enricher: FeedEnricher,
    ) -> None:
        self.posts = posts
        self.users = users
        self.enricher = enricher

    async def timeline_for_authors(
        self,
        author_ids: Sequence[int],
        viewer: IdentityContext | None,
        skip: int | None = None,
        limit: int | None = None,
    ) -> list[EnrichedPost]:
        """Return posts by any of ``author_ids``, newest first."""
        ids = [require_id(author_id, "author id") for author_id in author_ids]
        _check_page(skip, limit)
        page = await self.posts.find_by_author_ids(ids, skip, limit)
        return await self.enricher.enrich_sequence(page, viewer)

    async def home_timeline(
        self,
        viewer: IdentityContext | None,
        skip: int | None = None,
        limit: int | None = None,
    ) -> list[EnrichedPost]:
        """Return posts by the viewer and everyone the viewer follows.

        Raises:
            UnauthorizedError: If the viewer is anonymous.
        """
        user_id = await require_user_id(viewer)
        followees = await self.users.followee_ids(user_id)
        return await self.timeline_for_authors(
            [user_id, *followees], Authenticated(user_id), skip, limit
        )

    async def reposts_of(
        self,
        post_id: int,
        viewer: IdentityContext | None,
        skip: int | None = None,
        limit: int | None = None,
    ) -> list[EnrichedPost]:
        """Return posts reposting ``post_id``, newest first.

        The target itself need not exist any more; reposts of a deleted post
        are still listed.
        """
        require_id(post_id, "post id")
        _check_page(skip, limit)
        page = await self.posts.find_by_repost_target(post_id, skip, limit)
        return await self.enricher.enrich_sequence(page, viewer)

    async def likers_of(
        self,
        post: Post,
        viewer: IdentityContext | None,
        skip: int | None = None,
        limit: int | None = None,
    ) -> list[UserSummary]:
        """Return summaries of the users who liked ``post``, in like order."""
        _check_page(skip, limit)
        return await self.users.find_by_ids(post.liker_ids, viewer, skip, limit)

    async def find_post(self, post_id: int) -> Post:
        """Return the stored post or raise PostNotFoundError."""
        require_id(post_id, "post id")
        post = await self.posts.find_by_id(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        return post

    async def get_post(self, post_id: int, viewer: IdentityContext | None) -> EnrichedPost:
        """Return the enriched view of a single post."""
        post = await self.find_post(post_id)
        return await self.enricher.enrich(post, viewer)

    async def like(self, user_id: int, post_id: int) -> Post:
        """Add ``user_id`` to the likers of ``post_id``.

        Liking an already liked post is a no-op that returns the current state.
        """
        require_id(user_id, "user id")
        require_id(post_id, "post id")
        if not await self.users.exists(user_id):
            raise UserNotFoundError(user_id)
        post = await self.find_post(post_id)
        if await self.posts.add_liker(post, user_id):
            logger.debug("User %d liked post %d", user_id, post_id)
        return post

    async def unlike(self, user_id: int, post_id: int) -> Post:
        """Remove ``user_id`` from the likers of ``post_id``.

        Unliking a post that was never liked is a no-op that returns the
        current state.
        """
        require_id(user_id, "user id")
        post = await self.find_post(post_id)
        if await self.posts.remove_liker(post, user_id):
            logger.debug("User %d unliked post %d", user_id, post_id)
        return post

    async def create_post(
        self,
        author_id: int,
        body: str,
        repost_target_id: int | None = None,
    ) -> EnrichedPost:
        """Create a post or a repost and return it enriched for its author.

        Raises:
            InvalidOperationError: If a plain post has an empty body.
            PostNotFoundError: If the repost target does not exist.
        """
        require_id(author_id, "author id")
        if repost_target_id is None:
            if not body.strip():
                raise InvalidOperationError("A post needs a body unless it is a repost")
        else:
            await self.find_post(repost_target_id)

        post = await self.posts.create(
            author_id=author_id,
            body=body,
            repost_target_id=repost_target_id,
        )
        logger.info("User %d created post %d", author_id, post.id)
        return await self.enricher.enrich(post, Authenticated(author_id))

    async def update_post(self, post_id: int, author_id: int, body: str) -> EnrichedPost:
        """Replace the body of a post owned by ``author_id``."""
        require_id(author_id, "author id")
        post = await self.find_post(post_id)
        if post.author_id != author_id:
            raise UnauthorizedError("Only the author can edit a post")
        if not body.strip() and not post.is_repost:
            raise InvalidOperationError("A post needs a body unless it is a repost")
        updated = await self.posts.update_body(post_id, body)
        if updated is None:
            raise PostNotFoundError(post_id)
        return await self.enricher.enrich(updated, Authenticated(author_id))

    async def delete_post(self, post_id: int, author_id: int) -> Post:
        """Delete a post owned by ``author_id``.

        Reposts pointing at it keep their now dangling target id.
        """
        require_id(author_id, "author id")
        post = await self.find_post(post_id)
        if post.author_id != author_id:
            raise UnauthorizedError("Only the author can delete a post")
        deleted = await self.posts.delete(post_id)
        if deleted is None:
            raise PostNotFoundError(post_id)
        logger.info("User %d deleted post %d", author_id, post_id)
        return deleted

    async def follow(self, follower_id: int, followee_id: int) -> bool:
        """Make ``follower_id`` follow ``followee_id``; idempotent."""
        require_id(follower_id, "follower id")
        require_id(followee_id, "followee id")
        if follower_id == followee_id:
            raise InvalidOperationError("Users cannot follow themselves")
        if not await self.users.exists(followee_id):
            raise UserNotFoundError(followee_id)
        return await self.users.follow(follower_id, followee_id)

    async def unfollow(self, follower_id: int, followee_id: int) -> bool:
        """Remove a follow edge; idempotent."""
        require_id(follower_id, "follower id")
        require_id(followee_id, "followee id")
        return await self.users.unfollow(follower_id, followee_id)
