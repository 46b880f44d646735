# mypy: ignore-errors
# tests/test_identity.py
"""Tests for identity contexts and token verification."""

from unittest.mock import AsyncMock

import pytest

from chirpline.core.errors import UnauthorizedError
from chirpline.core.identity import ANONYMOUS, Anonymous, Authenticated, require_user_id, resolve_identity
from chirpline.core.security import BearerIdentity, create_access_token, decode_access_token


@pytest.mark.asyncio
async def test_closed_variants_resolve_to_themselves() -> None:
    viewer = Authenticated(7, {"role": "member"})

    assert await resolve_identity(None) is ANONYMOUS
    assert await resolve_identity(ANONYMOUS) is ANONYMOUS
    assert await resolve_identity(viewer) is viewer
    assert viewer.details() == {"role": "member", "id": 7}
    assert ANONYMOUS.details() is None


@pytest.mark.asyncio
async def test_require_user_id() -> None:
    assert await require_user_id(Authenticated(3)) == 3
    with pytest.raises(UnauthorizedError):
        await require_user_id(Anonymous())


def test_token_round_trip_and_tampering() -> None:
    token = create_access_token(42)

    assert decode_access_token(token)["sub"] == "42"
    assert decode_access_token(token + "x") is None
    assert decode_access_token("not-a-token") is None


@pytest.mark.asyncio
async def test_bearer_identity_checks_once_and_caches() -> None:
    user_exists = AsyncMock(return_value=True)
    viewer = BearerIdentity(create_access_token(42, {"scope": "feed"}), user_exists)

    assert await viewer.is_authenticated() is True
    assert await viewer.is_authenticated() is True
    user_exists.assert_awaited_once_with(42)

    resolved = await resolve_identity(viewer)
    assert resolved == Authenticated(42, {"scope": "feed"})


@pytest.mark.asyncio
async def test_bearer_identity_for_missing_user_is_anonymous() -> None:
    viewer = BearerIdentity(create_access_token(42), AsyncMock(return_value=False))

    assert await resolve_identity(viewer) is ANONYMOUS
    assert viewer.details() is None


@pytest.mark.asyncio
async def test_bearer_identity_with_bad_token_skips_user_lookup() -> None:
    user_exists = AsyncMock(return_value=True)
    viewer = BearerIdentity("garbage", user_exists)

    assert await viewer.is_authenticated() is False
    user_exists.assert_not_awaited()
