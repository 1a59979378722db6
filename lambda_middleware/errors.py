"""
Error taxonomy for lambda-middleware.

Application code raises :class:`HttpError` variants for failures that
map to a specific status code, and :class:`RequestValidationError` for
malformed input. Everything else is unrecognized and gets the generic
500 treatment from the error handler hook.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Discriminant used by the error handler to pick a response shape."""

    HTTP = "http"
    VALIDATION = "validation"
    UNRECOGNIZED = "unrecognized"


class MiddlewareError(Exception):
    """Base class for errors raised by this package."""


class ConfigError(MiddlewareError):
    """Raised when a configuration file cannot be used."""


class HttpError(MiddlewareError):
    """A failure that carries its own HTTP status and machine-readable code.

    Attributes:
        status: HTTP status code for the response
        code: Stable, machine-readable error code
        message: Human-readable message, safe to return to the caller
        meta: Optional structured details returned alongside the message
    """

    status = 500
    default_code = "HTTP_ERROR"
    default_message = "Request failed"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        meta: Any = None,
        status: int | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.meta = meta
        if status is not None:
            self.status = status
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, code={self.code!r}, message={self.message!r})"


class BadRequest(HttpError):
    status = 400
    default_code = "BAD_REQUEST"
    default_message = "Bad request"


class Unauthorized(HttpError):
    status = 401
    default_code = "UNAUTHORIZED"
    default_message = "Authentication required"


class Forbidden(HttpError):
    status = 403
    default_code = "FORBIDDEN"
    default_message = "Access denied"


class NotFound(HttpError):
    status = 404
    default_code = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(HttpError):
    status = 409
    default_code = "CONFLICT"
    default_message = "Resource conflict"


class UnprocessableEntity(HttpError):
    status = 422
    default_code = "UNPROCESSABLE_ENTITY"
    default_message = "Request could not be processed"


class TooManyRequests(HttpError):
    status = 429
    default_code = "TOO_MANY_REQUESTS"
    default_message = "Too many requests"


class InternalServerError(HttpError):
    status = 500
    default_code = "INTERNAL_SERVER_ERROR"
    default_message = "An unexpected error occurred"


class ServiceUnavailable(HttpError):
    status = 503
    default_code = "SERVICE_UNAVAILABLE"
    default_message = "Service temporarily unavailable"


class RequestValidationError(MiddlewareError):
    """Malformed input, with one entry per problem found.

    Each issue is a dict, typically ``{"path": [...], "message": "..."}``.
    """

    def __init__(self, issues: list[dict[str, Any]], message: str = "Request validation failed") -> None:
        self.issues = list(issues)
        super().__init__(message)


def classify_error(error: BaseException) -> ErrorKind:
    """Map an exception onto its :class:`ErrorKind`."""
    if isinstance(error, HttpError):
        return ErrorKind.HTTP
    if isinstance(error, RequestValidationError):
        return ErrorKind.VALIDATION
    return ErrorKind.UNRECOGNIZED
