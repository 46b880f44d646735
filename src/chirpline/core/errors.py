"""Typed failures raised by the feed core.

The HTTP layer is the only place these are translated into status codes.
"""

from __future__ import annotations


class FeedError(RuntimeError):
    """Base exception for all feed-related failures."""


class NotFoundError(FeedError):
    """Raised when the primary subject of an operation does not exist."""

    resource = "Resource"

    def __init__(self, resource_id: object) -> None:
        super().__init__(f"{self.resource} {resource_id!r} not found")
        self.resource_id = resource_id


class PostNotFoundError(NotFoundError):
    """Raised when a post lookup on the primary subject comes back empty."""

    resource = "Post"


class UserNotFoundError(NotFoundError):
    """Raised when a user lookup on the primary subject comes back empty."""

    resource = "User"


class UnauthorizedError(FeedError):
    """Raised when an operation needs an authenticated identity it did not get.

    Enrichment never raises this; anonymous viewers simply get no
    viewer-relative flags.
    """


class StoreUnavailableError(FeedError):
    """Raised when the backing store or user resolver fails.

    The core does not retry; retry policy belongs to the caller.
    """


class InvalidOperationError(FeedError, ValueError):
    """Raised for malformed requests, before any store call is issued."""


def require_id(value: object, name: str = "id") -> int:
    """Return ``value`` if it is a usable identifier.

    Raises:
        InvalidOperationError: If ``value`` is not a positive integer.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidOperationError(f"Malformed {name}: {value!r}")
    return value
