from __future__ import annotations

from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.propagate import extract, inject


def inject_headers(headers: dict[str, str] | None = None) -> dict[str, str]:
    carrier: dict[str, str] = headers or {}
    inject(carrier)
    return carrier


def context_from_traceparent(traceparent: str | None) -> Context | None:
    """Rebuild the producer's trace context from an outbox payload."""
    if not traceparent:
        return None
    return extract({"traceparent": traceparent})


def current_trace_id() -> str:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return ""
    return format(span_context.trace_id, "032x")


def current_traceparent() -> str | None:
    carrier: dict[str, str] = {}
    inject(carrier)
    return carrier.get("traceparent")
