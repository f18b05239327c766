from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TaskServiceError(Exception):
    """Base class for errors raised by the task engine."""

    kind = "TaskServiceError"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(TaskServiceError):
    """Malformed or out-of-range input."""

    kind = "ValidationError"


class NotFoundError(TaskServiceError):
    """A referenced task or user does not exist."""

    kind = "NotFoundError"

    def __init__(self, resource: str, identifier: str) -> None:
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} '{identifier}' not found")


class AuthorizationError(TaskServiceError):
    """The caller lacks the required relationship to the task."""

    kind = "AuthorizationError"


class ConflictError(TaskServiceError):
    """The request conflicts with itself, e.g. a duplicate id in a batch."""

    kind = "ConflictError"


_STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}


def _error_body(kind: str, message: str) -> dict:
    return {"error": kind, "message": message}


def task_service_error_handler(request: Request, exc: TaskServiceError) -> JSONResponse:
    """
    Translate a TaskServiceError into its JSON response.

    Response format:
        {"error": "<kind>", "message": "<human readable message>"}
    """
    status_code = _STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=status_code, content=_error_body(exc.kind, exc.message))


_HTTP_ERROR_KINDS = {
    status.HTTP_401_UNAUTHORIZED: "AuthenticationError",
    status.HTTP_403_FORBIDDEN: "AuthorizationError",
    status.HTTP_404_NOT_FOUND: "NotFoundError",
}


def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework-level HTTP errors (401, unknown routes) with the same body shape."""
    kind = _HTTP_ERROR_KINDS.get(exc.status_code, "HTTPError")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(kind, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold the original exception object, which is not JSON serializable
    errors = []
    for error in exc.errors():
        cleaned = {k: v for k, v in error.items() if k != "ctx"}
        if "ctx" in error:
            cleaned["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(cleaned)
    return errors


def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("InternalError", "An unexpected error occurred"),
    )
