"""Tracing helpers for provider calls.

Every backend leg of a query (Gemini, Serper, DeepSeek) and the executor
itself run inside a span named after the leg. With only ``opentelemetry-api``
installed the tracer is a no-op, so spans cost nothing until an SDK is
configured.
"""

from __future__ import annotations

from contextlib import nullcontext
from typing import Any, Dict

TRACER_NAME = "accountable.grounded_query"

_ATTR_TYPES = (str, bool, int, float)


def _clean_attrs(attrs: Dict[str, Any] | None) -> Dict[str, Any]:
    # OpenTelemetry rejects None and non-primitive attribute values
    return {k: v for k, v in (attrs or {}).items() if isinstance(v, _ATTR_TYPES)}


def otel_span(name: str, attrs: Dict[str, Any] | None = None):
    """Span context manager for one provider leg, or a no-op without a tracer."""
    try:
        from opentelemetry import trace
        tracer = trace.get_tracer(TRACER_NAME)
        return tracer.start_as_current_span(name, attributes=_clean_attrs(attrs))
    except Exception:
        return nullcontext()  # type: ignore[return-value]


def set_span_attrs(span: Any, **attrs: Any) -> None:
    """Attach outcome attributes (engine, latency, source count) to a span."""
    if span is None:
        return
    for key, value in _clean_attrs(attrs).items():
        try:
            span.set_attribute(key, value)
        except Exception:
            pass
