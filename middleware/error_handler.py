"""
Uniform JSON error bodies.

Every failure leaving the API has the same shape (``ErrorResponse``) and
echoes the request id, so a client report can be matched to the log line
written here.  ``AppBaseException`` subclasses carry their own status and
code; database and framework errors are mapped below.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import AppBaseException, ErrorDetail
from core.logging_config import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class ErrorResponse(BaseModel):
    request_id: str
    timestamp: str
    status: int
    error: str
    message: str
    path: str
    details: list[ErrorDetail] = []


def _request_id(request: Request) -> str:
    return (
        getattr(request.state, "request_id", None)
        or request.headers.get(REQUEST_ID_HEADER)
        or str(uuid.uuid4())
    )


def error_response(
    request: Request,
    http_status: int,
    error_code: str,
    message: str,
    details: list[ErrorDetail] | None = None,
) -> JSONResponse:
    request_id = _request_id(request)
    body = ErrorResponse(
        request_id=request_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
        status=http_status,
        error=error_code,
        message=message,
        path=request.url.path,
        details=details or [],
    )
    return JSONResponse(
        status_code=http_status,
        content=body.model_dump(),
        headers={REQUEST_ID_HEADER: request_id},
    )


def _log(request: Request, exc: Exception, level: int, with_traceback: bool = False) -> None:
    logger.log(
        level,
        "%s %s failed: %s: %s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc,
        extra={
            "request_id": _request_id(request),
            "client_host": request.client.host if request.client else "unknown",
        },
        exc_info=exc if with_traceback else None,
    )


async def handle_app_exception(request: Request, exc: AppBaseException) -> JSONResponse:
    # Caller mistakes are routine; only server-side failures are errors.
    _log(request, exc, logging.ERROR if exc.http_status >= 500 else logging.WARNING)
    return error_response(request, exc.http_status, exc.error_code, exc.message, exc.details)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        ErrorDetail(
            code=err.get("type", "invalid"),
            message=err.get("msg", "Invalid value"),
            field=".".join(str(part) for part in err.get("loc", ())[1:]) or None,
        )
        for err in exc.errors()
    ]
    _log(request, exc, logging.INFO)
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed.",
        details,
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    _log(request, exc, logging.WARNING)
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error_response(request, exc.status_code, f"HTTP_{exc.status_code}", message)


def handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # Called directly by SlowAPIMiddleware, hence not a coroutine.
    _log(request, exc, logging.WARNING)
    return error_response(
        request,
        status.HTTP_429_TOO_MANY_REQUESTS,
        "RATE_LIMIT_EXCEEDED",
        f"Rate limit exceeded: {exc.detail}",
    )


async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    """A uniqueness race the repositories did not translate."""
    _log(request, exc, logging.WARNING)
    return error_response(
        request, status.HTTP_409_CONFLICT, "CONFLICT", "The record already exists."
    )


async def handle_database_unavailable(request: Request, exc: OperationalError) -> JSONResponse:
    _log(request, exc, logging.ERROR, with_traceback=True)
    return error_response(
        request,
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "DATABASE_UNAVAILABLE",
        "The database is temporarily unavailable.",
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    _log(request, exc, logging.ERROR, with_traceback=True)
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred. Please try again later.",
    )


def add_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppBaseException, handle_app_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RateLimitExceeded, handle_rate_limit)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(OperationalError, handle_database_unavailable)
    app.add_exception_handler(Exception, handle_unexpected)


async def request_id_middleware(request: Request, call_next):
    """Assigns the request id, exposes it to log records and echoes it back."""
    request_id = _request_id(request)
    request.state.request_id = request_id
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response
