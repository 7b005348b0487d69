"""
Error taxonomy and logging helpers for the backend adapters.

Provider failures are raised as :class:`BackendError` subclasses so the
executor and the HTTP layer can tell which leg of a grounded query failed
without depending on aiohttp/openai exception types.
"""

from __future__ import annotations

import asyncio
import traceback
from typing import Any, Dict, Optional

import structlog

_logger = structlog.get_logger(__name__)


# --------------------------------------------------------------------------- #
#                               Exceptions                                    #
# --------------------------------------------------------------------------- #


class BackendError(Exception):
    """A call to an external generative or search backend failed."""

    kind = "backend_unavailable"

    def __init__(self, message: str, *, provider: str, status: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status = status


class PrimaryBackendError(BackendError):
    """Gemini request failed (transport, HTTP status or malformed body)."""


class SearchProviderError(BackendError):
    """Serper search request failed."""


class FallbackBackendError(BackendError):
    """DeepSeek completion request failed or returned no choices."""


class SchemaDefinitionError(ValueError):
    """A schema descriptor violates its structural invariants."""


class StructuredOutputError(ValueError):
    """Structured output was required but the backend text did not parse."""

    def __init__(self, message: str, *, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


# --------------------------------------------------------------------------- #
#                               Logging                                       #
# --------------------------------------------------------------------------- #


def _log(level: str, event: str, **fields: Any) -> None:
    log = getattr(_logger, level, _logger.warning)
    log(event, **fields)


def log_exception(context: str, exc: BaseException, **fields: Any) -> None:
    """Log an exception with context; never raises."""
    try:
        _log("warning", context, error=str(exc), error_type=type(exc).__name__, **fields)
    except Exception:
        # Avoid secondary failures during error handling
        pass


# --------------------------------------------------------------------------- #
#                            Error classification                             #
# --------------------------------------------------------------------------- #

# User-facing messages and HTTP status per error kind.
ERROR_CLASSIFICATIONS: Dict[str, Dict[str, Any]] = {
    "backend_unavailable": {
        "user_message": "Data unavailable, please retry",
        "status_code": 503,
        "severity": "error",
    },
    "rate_limit": {
        "user_message": "Intelligence provider is busy, please retry shortly",
        "status_code": 503,
        "severity": "warning",
    },
    "timeout": {
        "user_message": "Intelligence provider took too long, please retry",
        "status_code": 504,
        "severity": "warning",
    },
    "invalid_schema": {
        "user_message": "Response schema is malformed",
        "status_code": 400,
        "severity": "info",
    },
    "no_data": {
        "user_message": "No data available",
        "status_code": 502,
        "severity": "info",
    },
}


def identify_error_type(error: BaseException) -> str:
    """Heuristic classification of provider and request errors."""
    if isinstance(error, SchemaDefinitionError):
        return "invalid_schema"
    if isinstance(error, StructuredOutputError):
        return "no_data"
    status = getattr(error, "status", None)
    msg = str(error).lower()
    if status == 429 or "quota" in msg or "rate limit" in msg:
        return "rate_limit"
    cause = error.__cause__ or error
    if isinstance(cause, asyncio.TimeoutError) or "timed out" in msg:
        return "timeout"
    if isinstance(error, BackendError):
        return "backend_unavailable"
    return "unknown"


def classify_and_log_error(error: BaseException, context: Dict[str, Any]) -> Dict[str, Any]:
    """Classify errors and provide user-friendly feedback while logging.

    Returns a dict containing at least ``user_message``, ``status_code`` and
    ``severity``.
    """
    try:
        classification = identify_error_type(error)
        info = ERROR_CLASSIFICATIONS.get(
            classification,
            {"user_message": "An unexpected error occurred", "status_code": 500, "severity": "error"},
        )
        _log(
            "error" if info.get("severity") == "error" else "warning",
            "Classified error occurred",
            error_type=classification,
            error_message=str(error),
            provider=getattr(error, "provider", None),
            severity=info.get("severity"),
            context=context,
            stack_trace=(traceback.format_exc() if info.get("severity") == "error" else None),
        )
        return {"kind": classification, **info}
    except Exception:
        # Never raise from error reporting
        return {"kind": "unknown", "user_message": "An unexpected error occurred", "status_code": 500, "severity": "error"}
