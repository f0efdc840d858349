"""
Global Exception Handler for FastAPI Application.

This module maps agent core errors raised before a stream starts to HTTP
status codes, and provides a global exception handler that catches all
unhandled exceptions and logs detailed information including error ID,
request context, and full traceback for debugging purposes.
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from toolchat_ai.agent_core.errors import (
    InvalidReviewAction,
    RunNotSuspendedError,
    ThreadStateConflict,
    ToolChatError,
)
from toolchat_ai.core.logging_config import get_logger

logger = get_logger(__name__)


def _status_for(exc: ToolChatError) -> int:
    if isinstance(exc, ThreadStateConflict):
        return 409
    if isinstance(exc, (InvalidReviewAction, RunNotSuspendedError)):
        return 400
    return 500


async def tool_chat_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Translate agent core errors into JSON error responses.

    Args:
        request: The HTTP request that caused the exception
        exc: The agent core error

    Returns:
        JSONResponse with the error message and type
    """
    assert isinstance(exc, ToolChatError)
    status_code = _status_for(exc)
    if status_code >= 500:
        return await global_exception_handler(request, exc)
    logger.info(f"{request.method} {request.url.path} rejected with {status_code}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns a JSON response with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": "".join(traceback.format_exception(exc)),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(ToolChatError, tool_chat_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
