from __future__ import annotations

from opentelemetry import trace

from shared.observability import context_from_traceparent, current_trace_id, inject_headers

_TRACEPARENT = "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01"


def test_context_from_traceparent_restores_remote_span() -> None:
    context = context_from_traceparent(_TRACEPARENT)

    assert context is not None
    span_context = trace.get_current_span(context).get_span_context()
    assert format(span_context.trace_id, "032x") == "4bf92f3577b34da6a3ce929d0e0e4736"
    assert span_context.is_remote is True


def test_context_from_traceparent_ignores_missing_value() -> None:
    assert context_from_traceparent(None) is None
    assert context_from_traceparent("") is None


def test_current_trace_id_is_empty_outside_a_span() -> None:
    assert current_trace_id() == ""


def test_inject_headers_keeps_existing_entries() -> None:
    headers = inject_headers({"Accept": "application/json"})

    assert headers["Accept"] == "application/json"
