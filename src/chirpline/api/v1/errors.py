"""Translation of feed failures into HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from chirpline.core.errors import (
    FeedError,
    InvalidOperationError,
    NotFoundError,
    StoreUnavailableError,
    UnauthorizedError,
)

_STATUS_BY_ERROR: tuple[tuple[type[FeedError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (InvalidOperationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(error: FeedError) -> int:
    """Return the HTTP status code for a feed failure."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def feed_error_handler(request: Request, exc: FeedError) -> JSONResponse:
    """Render a FeedError as a JSON ``detail`` response."""
    status_code = status_for(exc)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content={"detail": str(exc)}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the FeedError handler on ``app``."""
    app.add_exception_handler(FeedError, feed_error_handler)  # type: ignore[arg-type]
