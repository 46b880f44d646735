# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from chirpline.db.session import Base
from chirpline.models import Post, User
from chirpline.repositories.post_repo import PostRepository
from chirpline.repositories.user_repo import UserRepository
from chirpline.services.enrichment import FeedEnricher
from chirpline.services.feed_service import FeedService

TEST_DB_URL = "sqlite+aiosqlite://"
BASE_TIME = datetime(2026, 1, 1, tzinfo=UTC)

MakePost = Callable[..., Awaitable[Post]]


@pytest_asyncio.fixture()
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    SessionLocal = async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    async with SessionLocal() as session:
        yield session


@pytest.fixture()
def post_repo(db_session: AsyncSession) -> PostRepository:
    return PostRepository(db_session)


@pytest.fixture()
def user_repo(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture()
def enricher(post_repo: PostRepository, user_repo: UserRepository) -> FeedEnricher:
    return FeedEnricher(post_repo, user_repo)


@pytest.fixture()
def feed_service(
    post_repo: PostRepository,
    user_repo: UserRepository,
    enricher: FeedEnricher,
) -> FeedService:
    return FeedService(post_repo, user_repo, enricher)


@pytest_asyncio.fixture()
async def alice(user_repo: UserRepository) -> User:
    """Create and return the primary test user."""
    return await user_repo.create(username="alice", display_name="Alice")


@pytest_asyncio.fixture()
async def bob(user_repo: UserRepository) -> User:
    """Create and return a second test user."""
    return await user_repo.create(username="bob", display_name="Bob")


@pytest_asyncio.fixture()
async def carol(user_repo: UserRepository) -> User:
    """Create and return a third test user."""
    return await user_repo.create(username="carol", display_name="Carol")


@pytest.fixture()
def make_post(post_repo: PostRepository) -> MakePost:
    """Return a factory creating posts with strictly increasing timestamps."""
    minutes = count(1)

    async def _make_post(
        author: User,
        body: str = "hello",
        repost_of: Post | None = None,
    ) -> Post:
        return await post_repo.create(
            author_id=author.id,
            body=body,
            repost_target_id=repost_of.id if repost_of is not None else None,
            created_at=BASE_TIME + timedelta(minutes=next(minutes)),
        )

    return _make_post
