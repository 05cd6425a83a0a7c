"""
Custom exceptions and exception handlers for the application.

Every handler renders the same flat body, ``{"error": <message>, "code": <code>}``,
so the frontend only has to look at one field to show a failure.
"""

from typing import Any, Dict, Optional
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.logging import get_logger

logger = get_logger(__name__)


class ApplicationError(Exception):
    """Base application exception."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ApplicationError):
    """Raised when input validation fails."""

    status_code = 400


class ConfigurationError(ApplicationError):
    """Raised when configuration is invalid."""
    pass


class ServiceError(ApplicationError):
    """Raised when external service calls fail."""
    pass


class UpstreamError(ServiceError):
    """Raised when the Gemini call itself fails."""
    pass


class SchemaViolationError(ServiceError):
    """Raised when Gemini output does not match the requested insights schema."""

    status_code = 502


class ClientDisconnectedError(ApplicationError):
    """Raised when the caller hangs up before the insights are ready."""

    status_code = 499


def _error_body(message: str, code: str) -> Dict[str, Any]:
    return {"error": message, "code": code}


async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle validation errors."""
    logger.warning(
        f"Validation error: {exc.message}",
        extra={
            "error_code": exc.error_code,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.error_code),
    )


async def application_exception_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    """Handle configuration, upstream and schema errors raised by the pipeline."""
    log = logger.warning if isinstance(exc, ClientDisconnectedError) else logger.error
    log(
        f"{exc.__class__.__name__}: {exc.message}",
        extra={
            "error_code": exc.error_code,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.error_code),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(
        f"HTTP error {exc.status_code}: {exc.detail}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), f"HTTP_{exc.status_code}"),
        headers=getattr(exc, "headers", None),
    )


def _describe_request_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "Invalid request: " + "; ".join(parts) if parts else "Invalid request"


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI request validation errors."""
    return await validation_exception_handler(
        request,
        ValidationError(
            _describe_request_errors(exc),
            error_code="REQUEST_VALIDATION_ERROR",
            details={"errors": [error.get("msg") for error in exc.errors()]},
        ),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors."""
    logger.error(
        f"Unexpected error: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content=_error_body("An unexpected error occurred", "INTERNAL_SERVER_ERROR"),
    )
