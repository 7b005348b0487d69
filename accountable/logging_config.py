"""Structured logging for the civic intelligence API.

Every event is a JSON line carrying the request id (bound by the HTTP
middleware) plus the executor's own fields: ``engine``, ``model``,
``grounded``, ``sources``. Third-party loggers (aiohttp, openai, uvicorn) go
through the same structlog formatter so one stream holds the whole request.

:func:`configure_logging` runs once from the app factory; modules just call
``structlog.get_logger(__name__)``.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, MutableMapping, Optional

import structlog

__all__ = [
    "configure_logging",
    "bind_request_context",
]

# Event keys that may carry provider credentials
_SECRET_KEYS = frozenset({"api_key", "x-goog-api-key", "x-api-key", "authorization"})


def _redact_secrets(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]):
    for key in list(event_dict):
        if key.lower() in _SECRET_KEYS and event_dict[key]:
            event_dict[key] = "***"
    return event_dict


def configure_logging(force: bool = False) -> None:
    """Install the JSON (or ``LOG_PRETTY=1`` console) pipeline once.

    ``LOG_LEVEL`` sets the root level. ``force`` reconfigures, e.g. from a
    script that wants a different renderer.
    """
    if getattr(structlog, "_is_configured", False) and not force:  # type: ignore[attr-defined]
        return

    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    pretty = os.getenv("LOG_PRETTY", "0").lower() in {"1", "true", "yes"}
    renderer = structlog.dev.ConsoleRenderer() if pretty else structlog.processors.JSONRenderer()

    timestamper = structlog.processors.TimeStamper(fmt="iso")
    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        timestamper,
        _redact_secrets,
    ]

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # Client libraries log every request at INFO
    for noisy in ("aiohttp.access", "httpx", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    setattr(structlog, "_is_configured", True)  # type: ignore[attr-defined]


def bind_request_context(request_id: Optional[str] = None, **extra: str) -> None:
    """Bind the request id (and any extra non-empty fields) for later events."""
    payload: Dict[str, str] = {k: v for k, v in extra.items() if v}
    if request_id:
        payload["request_id"] = request_id
    if payload:
        structlog.contextvars.bind_contextvars(**payload)
