"""Helpers shared by the SQLAlchemy-backed stores."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import Select
from sqlalchemy.exc import SQLAlchemyError

from chirpline.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

SelectT = TypeVar("SelectT", bound=Select)  # type: ignore[type-arg]


@contextmanager
def store_errors(store: str, operation: str) -> Iterator[None]:
    """Re-raise database failures inside the block as StoreUnavailableError."""
    try:
        yield
    except SQLAlchemyError as err:
        logger.error("%s failed during %s: %s", store, operation, err, exc_info=True)
        raise StoreUnavailableError(f"{store} unavailable during {operation}") from err


def paginate(stmt: SelectT, skip: int | None, limit: int | None) -> SelectT:
    """Apply offset/limit only when they were explicitly requested."""
    if skip:
        stmt = stmt.offset(skip)
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt
