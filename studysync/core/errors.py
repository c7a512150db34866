import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class StudySyncError(Exception):
    """Base class for domain errors surfaced to API callers."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StudySyncError):
    """Malformed input or persisted data. Never silently clamped."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(StudySyncError):
    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(StudySyncError):
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(StudySyncError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.extra = extra


async def studysync_error_handler(request: Request, exc: StudySyncError) -> JSONResponse:
    body = {"detail": exc.message}
    if isinstance(exc, ValidationError) and exc.field:
        body["field"] = exc.field
    if isinstance(exc, ConflictError):
        body.update(exc.extra)
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StudySyncError, studysync_error_handler)
