from shared.observability.attributes import (
    CHANNEL,
    NOTIFICATION_KIND,
    RATE_SOURCE,
    STATUS,
    TRACE_ID,
    TRANSACTION_ID,
    TRANSACTION_NUMBER,
)
from shared.observability.otel import configure_otel
from shared.observability.propagation import (
    context_from_traceparent,
    current_trace_id,
    current_traceparent,
    inject_headers,
)

__all__ = [
    "CHANNEL",
    "NOTIFICATION_KIND",
    "RATE_SOURCE",
    "STATUS",
    "TRACE_ID",
    "TRANSACTION_ID",
    "TRANSACTION_NUMBER",
    "configure_otel",
    "context_from_traceparent",
    "current_trace_id",
    "current_traceparent",
    "inject_headers",
]
