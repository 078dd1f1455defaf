"""
Service exceptions and the handlers that render them.

Every error body on this service has the shape ``{"error": <message>}``.
Internal detail stays in the logs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from retention_service.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine
    from typing import Any

    from fastapi import FastAPI, Request
    from starlette.requests import Request as StarletteRequest

    ExceptionHandler = Callable[
        [StarletteRequest, Exception],
        Coroutine[Any, Any, JSONResponse],
    ]

NO_STORE = "no-store"

# Headers carried by every JSON response, success or error.
BASE_HEADERS: dict[str, str] = {
    "Cache-Control": NO_STORE,
    "Access-Control-Allow-Origin": "*",
    "Vary": "Origin",
}


class ServiceError(Exception):
    """
    Base exception for service errors.

    Attributes:
        error: Machine-readable error code (logged, not returned)
        message: Human-readable description returned to the caller
        status_code: HTTP status code
        details: Additional context for the logs
    """

    def __init__(
        self,
        error: str,
        message: str,
        status_code: int,
        details: dict[str, object] | None = None,
    ) -> None:
        self.error = error
        self.message = message
        self.status_code = status_code
        self.details: dict[str, object] = {} if details is None else details
        super().__init__(message)


class BadRequestError(ServiceError):
    """The caller supplied a missing or invalid identifier or payload."""

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        super().__init__("bad_request", message, 400, details)


class ObjectNotFoundError(ServiceError):
    """The requested key does not exist in its collection."""

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        super().__init__("not_found", message, 404, details)


class MethodNotAllowedError(ServiceError):
    """The request used a verb the endpoint does not support."""

    def __init__(self, method: str) -> None:
        super().__init__("method_not_allowed", "Method not allowed", 405, {"method": method})


class StoreUnavailableError(ServiceError):
    """
    The backing blob store could not be reached or answered with a fault.

    Raised for connection errors, timeouts, retryable HTTP statuses and
    filesystem errors. Callers on the read path translate it into a generic
    500; the sweep records its message against the failing item.
    """

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        super().__init__("store_unavailable", message, 503, details)


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build a ``{"error": message}`` JSON response with the base headers."""
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers=BASE_HEADERS,
    )


async def service_error_handler(
    request: Request,
    exc: ServiceError,
) -> JSONResponse:
    """Handle ServiceError exceptions."""
    logger = get_logger(__name__)
    extra = {
        "error_code": exc.error,
        "error_message": exc.message,
        "status_code": exc.status_code,
        "details": exc.details,
        "path": str(request.url.path),
        "method": request.method,
    }
    if exc.status_code >= 500:
        logger.warning("Service error", extra=extra)
    else:
        logger.info("Request rejected", extra=extra)
    return error_response(exc.status_code, exc.message)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """
    Render routing errors raised by the framework (unknown path, a verb no
    route accepts) in the service's error shape.
    """
    logger = get_logger(__name__)
    logger.info(
        "Request rejected",
        extra={
            "status_code": exc.status_code,
            "path": str(request.url.path),
            "method": request.method,
        },
    )
    message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
    response = error_response(exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def unhandled_exception_handler(
    request: Request,
    _exc: Exception,
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs full traceback but returns sanitized error to client.
    """
    logger = get_logger(__name__)
    logger.exception(
        "Unhandled exception",
        extra={
            "path": str(request.url.path),
            "method": request.method,
        },
    )
    return error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the app."""
    app.add_exception_handler(
        ServiceError,
        cast("ExceptionHandler", service_error_handler),
    )
    app.add_exception_handler(
        StarletteHTTPException,
        cast("ExceptionHandler", http_exception_handler),
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)
