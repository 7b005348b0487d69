"""
Error handlers for the Accountable India API
"""

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..utils.error_handling import (
    BackendError,
    SchemaDefinitionError,
    StructuredOutputError,
    classify_and_log_error,
)

logger = structlog.get_logger(__name__)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed messages"""
    error_messages = []
    for error in exc.errors():
        field = ".".join(str(x) for x in error["loc"][1:])  # Skip 'body' / 'query'
        if field == "prompt":
            error_messages.append("Prompt must be a non-empty string")
        else:
            error_messages.append(f"{field}: {error['msg']}")

    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation Error",
            "detail": error_messages,
            "request_id": _request_id(request),
        },
    )


async def backend_exception_handler(request: Request, exc: Exception):
    """Render backend / schema / structured-output failures with a retry hint."""
    info = classify_and_log_error(
        exc,
        {"path": request.url.path, "request_id": _request_id(request)},
    )
    content = {
        "error": info["kind"],
        "detail": info["user_message"],
        "request_id": _request_id(request),
    }
    if info["status_code"] in (503, 504):
        content["retryable"] = True
    return JSONResponse(status_code=info["status_code"], content=content)


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTP Error",
            "detail": exc.detail,
            "status_code": exc.status_code,
            "request_id": _request_id(request),
        },
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        request_id=_request_id(request),
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "request_id": _request_id(request),
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(BackendError, backend_exception_handler)
    app.add_exception_handler(SchemaDefinitionError, backend_exception_handler)
    app.add_exception_handler(StructuredOutputError, backend_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
