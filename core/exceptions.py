"""
Application error taxonomy.

Every error the service raises on purpose derives from ``AppBaseException``
and carries the HTTP status and machine-readable code that
``middleware.error_handler`` renders.  ``RecordParseError`` is the exception:
it never leaves the feed parser, which logs and drops the defective record.
"""

from __future__ import annotations

from fastapi import status
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str
    field: str | None = None


class AppBaseException(Exception):
    """Base for all application-level exceptions."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: list[ErrorDetail] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


# ---------------------------------------------------------------------------
# Feed
# ---------------------------------------------------------------------------

class FeedError(AppBaseException):
    """Transport, HTTP or payload failure talking to the fixture provider."""
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "FEED_UNAVAILABLE"


class RecordParseError(Exception):
    """A single fixture in an otherwise valid feed payload is unusable."""

    def __init__(self, message: str, fixture_id: int | None = None):
        super().__init__(message)
        self.fixture_id = fixture_id


# ---------------------------------------------------------------------------
# Storage / caller input
# ---------------------------------------------------------------------------

class DuplicateError(AppBaseException):
    http_status = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"


class NotFoundError(AppBaseException):
    http_status = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class ValidationError(AppBaseException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "VALIDATION_ERROR"


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class AuthenticationError(AppBaseException):
    http_status = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"


class TokenExpiredError(AuthenticationError):
    error_code = "TOKEN_EXPIRED"


class TokenInvalidError(AuthenticationError):
    error_code = "TOKEN_INVALID"


class ForbiddenError(AppBaseException):
    http_status = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"
