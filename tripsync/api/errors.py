"""Translate domain errors into HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tripsync.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    TripSyncError,
    UpstreamError,
    ValidationError,
)

STATUS_BY_ERROR: dict[type[TripSyncError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    UpstreamError: status.HTTP_502_BAD_GATEWAY,
}


async def handle_tripsync_error(request: Request, exc: Exception) -> JSONResponse:
    """Render a domain error as {"code", "detail"}."""
    assert isinstance(exc, TripSyncError)
    status_code = next(
        (code for cls, code in STATUS_BY_ERROR.items() if isinstance(exc, cls)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    return JSONResponse(status_code=status_code, content={"code": exc.code, "detail": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    """Install domain error handlers on the app."""
    app.add_exception_handler(TripSyncError, handle_tripsync_error)
