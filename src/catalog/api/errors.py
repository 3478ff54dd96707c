"""Error responses for the catalog API.

Every error leaves the API with the same body:

    {"error": true, "code": "NotFound", "message": "...",
     "timestamp": "...", "path": "/api/products/7", "method": "GET"}

Persistence errors raised by the database driver are mapped to HTTP
statuses here; the cache layer never raises, so it has no mapping.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """Base exception for catalog API errors."""

    def __init__(self, status_code: int, code: str, text: str):
        self.code = code
        self.text = text
        super().__init__(status_code=status_code, detail=text)


class NotFoundError(ApiError):
    """Resource not found (404)."""

    def __init__(self, resource_type: str, identifier: int | str):
        super().__init__(
            status_code=404,
            code="NotFound",
            text=f"{resource_type} with id '{identifier}' not found",
        )


class BadRequestError(ApiError):
    """Invalid request (400)."""

    def __init__(self, text: str):
        super().__init__(status_code=400, code="BadRequest", text=text)


class ConflictError(ApiError):
    """Duplicate or conflicting data (409)."""

    def __init__(self, text: str = "Duplicate entry found"):
        super().__init__(status_code=409, code="Conflict", text=text)


class ServiceUnavailableError(ApiError):
    """Database unreachable (503)."""

    def __init__(self, text: str = "Service temporarily unavailable"):
        super().__init__(status_code=503, code="ServiceUnavailable", text=text)


def error_body(request: Request, code: str, message: str) -> dict[str, Any]:
    return {
        "error": True,
        "code": code,
        "message": message,
        "timestamp": datetime.now(UTC).isoformat(),
        "path": request.url.path,
        "method": request.method,
    }


async def api_exception_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Exception handler for catalog API errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.code, exc.text),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report the first validation problem as a 400."""
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content=error_body(request, "ValidationError", message),
    )


async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Constraint violations raised by the database."""
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    if "unique" in str(exc.orig).lower():
        error: ApiError = ConflictError()
    else:
        error = BadRequestError("Required field missing or invalid reference")
    return await api_exception_handler(request, error)


async def database_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    """Connection-level database failures."""
    logger.error("Database unavailable on %s %s: %s", request.method, request.url.path, exc)
    return await api_exception_handler(request, ServiceUnavailableError())


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler for unexpected errors."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_body(request, "InternalServerError", "An unexpected error occurred"),
    )


EXCEPTION_HANDLERS: tuple[tuple[type[Exception], Any], ...] = (
    (ApiError, api_exception_handler),
    (RequestValidationError, validation_exception_handler),
    (IntegrityError, integrity_exception_handler),
    (OperationalError, database_unavailable_handler),
    (InterfaceError, database_unavailable_handler),
    (ConnectionRefusedError, database_unavailable_handler),
    (Exception, generic_exception_handler),
)
