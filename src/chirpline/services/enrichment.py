"""Read-time enrichment of stored posts into feed view models.

Counts and viewer flags are computed on every read instead of being stored on
the post, so they are always consistent without an invalidation mechanism.
The cost is bounded by page size because callers paginate before enriching.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from chirpline.core.identity import (
    Authenticated,
    IdentityContext,
    ResolvedIdentity,
    resolve_identity,
)
from chirpline.models.post import Post
from chirpline.repositories.post_repo import PostStore
from chirpline.repositories.user_repo import UserResolver
from chirpline.schemas.post import EnrichedPost

__all__ = ["FeedEnricher", "LIKERS_PREVIEW_SIZE", "MAX_REPOST_DEPTH"]

logger = logging.getLogger(__name__)

LIKERS_PREVIEW_SIZE = 5
MAX_REPOST_DEPTH = 3


@dataclass(frozen=True)
class _PagePrefetch:
    """Grouped per-page lookups shared by every post of one enrich_sequence call."""

    post_ids: frozenset[int]
    reposts_count: Mapping[int, int]
    # None for anonymous viewers: nothing viewer-relative is fetched for them.
    reposted: frozenset[int] | None


class FeedEnricher:
    """Turns stored posts into :class:`EnrichedPost` views for one viewer.

    The enricher holds no per-request state; all state lives in the stores it
    is given.

    Args:
        posts: Post store used for counts, existence checks and target lookups.
        users: Resolver used to build the liker preview.
        likers_preview: Number of liker summaries attached to each post.
        max_repost_depth: Maximum number of nested repost targets to attach.
            Deeper targets, and any target already on the current resolution
            path, are left unresolved.
        max_concurrency: Number of posts of a page enriched at once. Keep at 1
            when the stores share a single database session.
        batch: Prefetch page-level repost counts and repost flags with grouped
            queries instead of one query per post.
    """

    def __init__(
        self,
        posts: PostStore,
        users: UserResolver,
        *,
        likers_preview: int = LIKERS_PREVIEW_SIZE,
        max_repost_depth: int = MAX_REPOST_DEPTH,
        max_concurrency: int = 1,
        batch: bool = True,
    ) -> None:
        if likers_preview < 0:
            raise ValueError("likers_preview must be non-negative")
        if max_repost_depth < 0:
            raise ValueError("max_repost_depth must be non-negative")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.posts = posts
        self.users = users
        self.likers_preview = likers_preview
        self.max_repost_depth = max_repost_depth
        self.max_concurrency = max_concurrency
        self.batch = batch

    async def enrich(self, post: Post, viewer: IdentityContext | None) -> EnrichedPost:
        """Return the enriched view of a single post.

        The viewer's authentication is checked once, then reused for the post
        and every repost target beneath it.
        """
        resolved = await resolve_identity(viewer)
        return await self._enrich(post, resolved, (), None)

    async def enrich_sequence(
        self,
        posts: Iterable[Post],
        viewer: IdentityContext | None,
    ) -> list[EnrichedPost]:
        """Enrich an already paginated page of posts, preserving input order.

        If any post fails, the remaining work is cancelled and the error is
        re-raised; a partially enriched page is never returned.
        """
        page = list(posts)
        if not page:
            return []
        resolved = await resolve_identity(viewer)
        prefetch = await self._prefetch(page, resolved) if self.batch else None

        if self.max_concurrency == 1 or len(page) == 1:
            return [await self._enrich(post, resolved, (), prefetch) for post in page]

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run(post: Post) -> EnrichedPost:
            async with semaphore:
                return await self._enrich(post, resolved, (), prefetch)

        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [tg.create_task(run(post)) for post in page]
        except ExceptionGroup as group:
            # Siblings are already cancelled and awaited by the group.
            raise group.exceptions[0] from group
        return [task.result() for task in tasks]

    async def _prefetch(self, page: list[Post], viewer: ResolvedIdentity) -> _PagePrefetch:
        post_ids = [post.id for post in page]
        reposts_count = await self.posts.count_reposts_by_targets(post_ids)
        reposted = None
        if isinstance(viewer, Authenticated):
            reposted = frozenset(
                await self.posts.reposted_target_ids(viewer.user_id, post_ids)
            )
        return _PagePrefetch(
            post_ids=frozenset(post_ids),
            reposts_count=reposts_count,
            reposted=reposted,
        )

    async def _enrich(
        self,
        post: Post,
        viewer: ResolvedIdentity,
        path: tuple[int, ...],
        prefetch: _PagePrefetch | None,
    ) -> EnrichedPost:
        liker_ids = list(post.liker_ids)

        if prefetch is not None and post.id in prefetch.post_ids:
            reposts_count = prefetch.reposts_count.get(post.id, 0)
        else:
            reposts_count = await self.posts.count_by_repost_target(post.id)

        likers = []
        if liker_ids and self.likers_preview:
            likers = await self.users.find_by_ids(liker_ids, viewer, 0, self.likers_preview)

        is_liked = False
        is_reposted = False
        if isinstance(viewer, Authenticated):
            is_liked = viewer.user_id in liker_ids
            if (
                prefetch is not None
                and prefetch.reposted is not None
                and post.id in prefetch.post_ids
            ):
                is_reposted = post.id in prefetch.reposted
            else:
                is_reposted = await self.posts.exists_repost_by_author_and_target(
                    viewer.user_id, post.id
                )

        repost_target = None
        if post.repost_target_id is not None:
            repost_target = await self._resolve_target(post, viewer, path + (post.id,), prefetch)

        return EnrichedPost(
            id=post.id,
            author_id=post.author_id,
            body=post.body,
            repost_target_id=post.repost_target_id,
            liker_ids=liker_ids,
            created_at=post.created_at,
            updated_at=post.updated_at,
            likes_count=len(liker_ids),
            reposts_count=reposts_count,
            likers=likers,
            is_liked=is_liked,
            is_reposted=is_reposted,
            repost_target=repost_target,
        )

    async def _resolve_target(
        self,
        post: Post,
        viewer: ResolvedIdentity,
        path: tuple[int, ...],
        prefetch: _PagePrefetch | None,
    ) -> EnrichedPost | None:
        target_id = post.repost_target_id
        if target_id in path:
            logger.debug("Repost cycle at post %s -> %s, not resolving", post.id, target_id)
            return None
        if len(path) > self.max_repost_depth:
            logger.debug(
                "Repost chain deeper than %d at post %s, not resolving",
                self.max_repost_depth,
                post.id,
            )
            return None

        target = await self.posts.find_by_id(target_id)
        if target is None:
            logger.debug("Repost target %s of post %s no longer exists", target_id, post.id)
            return None
        return await self._enrich(target, viewer, path, prefetch)
