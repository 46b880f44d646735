# tests/v1/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from chirpline.core.security import create_access_token
from chirpline.db.session import get_session
from chirpline.main import app as fastapi_app
from chirpline.models import User


@pytest.fixture()
def app(db_session: AsyncSession) -> FastAPI:
    async def _get_session_override() -> AsyncIterator[AsyncSession]:
        yield db_session

    fastapi_app.dependency_overrides[get_session] = _get_session_override
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.pop(get_session, None)


@pytest_asyncio.fixture()
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a helper building authorization headers for a user."""

    def _auth_headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth_headers
