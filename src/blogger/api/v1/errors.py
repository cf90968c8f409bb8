"""Translate engagement errors into HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from blogger.core.errors import (
    AuthorizationError,
    ConflictError,
    EngagementError,
    InvalidStateError,
    NotFoundError,
    PartialFailure,
    SelfReferenceError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[EngagementError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    SelfReferenceError: status.HTTP_400_BAD_REQUEST,
    InvalidStateError: status.HTTP_400_BAD_REQUEST,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    ConflictError: status.HTTP_409_CONFLICT,
    PartialFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: EngagementError) -> int:
    """Return the HTTP status code for ``exc``."""
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def engagement_error_handler(request: Request, exc: EngagementError) -> JSONResponse:
    """Render an :class:`EngagementError` as ``{detail, kind, identifiers}``."""
    code = status_for(exc)
    if code >= 500:
        logger.error(
            "%s %s failed: %s %s",
            request.method,
            request.url.path,
            exc.kind,
            exc.identifiers,
            exc_info=exc,
        )
    return JSONResponse(status_code=code, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    """Install the engagement error handler on ``app``."""
    app.add_exception_handler(EngagementError, engagement_error_handler)
