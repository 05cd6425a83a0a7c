"""
Custom middleware for the application.
"""

import time
from typing import Callable
from fastapi import Request, Response
from fastapi.responses import JSONResponse

from app.core.logging import get_logger

logger = get_logger(__name__)


async def request_logging_middleware(request: Request, call_next: Callable) -> Response:
    """
    Log incoming requests and responses.
    """
    start_time = time.time()

    # Get client IP
    client_ip = request.client.host if request.client else "unknown"

    # Log incoming request
    logger.info(
        f"Incoming request: {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "client_ip": client_ip,
            "user_agent": request.headers.get("user-agent", "unknown"),
        }
    )

    # Process request
    response = await call_next(request)

    # Calculate processing time
    process_time = time.time() - start_time

    # Log response
    logger.info(
        f"Request completed: {request.method} {request.url.path} - {response.status_code}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time": round(process_time, 4),
            "client_ip": client_ip,
        }
    )

    # Add processing time to response headers
    response.headers["X-Process-Time"] = str(process_time)

    return response


async def error_handling_middleware(request: Request, call_next: Callable) -> Response:
    """
    Global error handling middleware.

    Last line of defence so callers always get a JSON body, never a raw traceback.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error(
            f"Unhandled exception in middleware: {str(exc)}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "exception_type": type(exc).__name__,
            },
            exc_info=True
        )

        return JSONResponse(
            status_code=500,
            content={
                "error": "An unexpected error occurred",
                "code": "INTERNAL_SERVER_ERROR",
            }
        )
