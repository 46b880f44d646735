"""Viewer identity used for viewer-relative feed fields.

The engine only ever sees the two closed variants, :class:`Anonymous` and
:class:`Authenticated`. Lazily verified identities (see
:class:`chirpline.core.security.BearerIdentity`) are collapsed into one of them
by :func:`resolve_identity`, which awaits the authentication check once.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from chirpline.core.errors import UnauthorizedError

__all__ = [
    "ANONYMOUS",
    "Anonymous",
    "Authenticated",
    "IdentityContext",
    "ResolvedIdentity",
    "require_user_id",
    "resolve_identity",
]


@runtime_checkable
class IdentityContext(Protocol):
    """Anything that can tell whether the requester is authenticated."""

    async def is_authenticated(self) -> bool:
        """Return True if the requester has a verified identity."""
        ...

    def details(self) -> dict[str, Any] | None:
        """Return identity attributes including ``id``, or None when anonymous."""
        ...


@dataclass(frozen=True)
class Anonymous:
    """Requester without a verified identity."""

    async def is_authenticated(self) -> bool:
        return False

    def details(self) -> None:
        return None


@dataclass(frozen=True)
class Authenticated:
    """Requester with a verified user id and optional extra attributes."""

    user_id: int
    attributes: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({}),
        hash=False,
    )

    async def is_authenticated(self) -> bool:
        return True

    def details(self) -> dict[str, Any]:
        return {**self.attributes, "id": self.user_id}


ResolvedIdentity = Anonymous | Authenticated

ANONYMOUS = Anonymous()


async def resolve_identity(viewer: IdentityContext | None) -> ResolvedIdentity:
    """Collapse any identity context into one of the two closed variants.

    ``None`` is treated as anonymous. The authentication check runs at most
    once per call.
    """
    if viewer is None:
        return ANONYMOUS
    if isinstance(viewer, (Anonymous, Authenticated)):
        return viewer
    if not await viewer.is_authenticated():
        return ANONYMOUS
    details = dict(viewer.details() or {})
    user_id = details.pop("id", None)
    if user_id is None:
        return ANONYMOUS
    return Authenticated(user_id=user_id, attributes=MappingProxyType(details))


async def require_user_id(viewer: IdentityContext | None) -> int:
    """Return the authenticated user id of ``viewer``.

    Raises:
        UnauthorizedError: If the viewer is anonymous.
    """
    resolved = await resolve_identity(viewer)
    if isinstance(resolved, Authenticated):
        return resolved.user_id
    raise UnauthorizedError("Authentication required")
