"""JWT helpers and the token-backed identity context."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from chirpline.core.settings import settings

logger = logging.getLogger(__name__)

UserExists = Callable[[int], Awaitable[bool]]


def create_access_token(user_id: int, extra_claims: dict[str, Any] | None = None) -> str:
    """Create a JWT access token for ``user_id``.

    Token issuance belongs to the external authentication service; this helper
    exists for operators and tests.
    """
    to_encode: dict[str, object] = {"sub": str(user_id)}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Return the verified claims of ``token``, or None if it is invalid."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        logger.debug("Rejected access token: %s", err)
        return None
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return payload


class BearerIdentity:
    """Identity context backed by a bearer token, verified on first use.

    The token signature is checked and the subject is looked up through
    ``user_exists``; the outcome is cached so repeated checks do not hit the
    store again.
    """

    def __init__(self, token: str, user_exists: UserExists) -> None:
        self._token = token
        self._user_exists = user_exists
        self._details: dict[str, Any] | None = None
        self._checked = False

    async def is_authenticated(self) -> bool:
        if not self._checked:
            self._details = await self._verify()
            self._checked = True
        return self._details is not None

    def details(self) -> dict[str, Any] | None:
        return self._details

    async def _verify(self) -> dict[str, Any] | None:
        payload = decode_access_token(self._token)
        if payload is None:
            return None
        user_id = int(payload["sub"])
        if not await self._user_exists(user_id):
            logger.info("Access token refers to missing user %d", user_id)
            return None
        claims = {key: value for key, value in payload.items() if key not in {"sub", "exp"}}
        return {**claims, "id": user_id}
