from __future__ import annotations

from opentelemetry import metrics

meter = metrics.get_meter("hubp2p-api")
request_counter = meter.create_counter("hubp2p_api_request_total", description="Total requests")
error_counter = meter.create_counter(
    "hubp2p_api_error_total", description="Total error responses"
)
latency_histogram = meter.create_histogram(
    "hubp2p_api_request_latency_ms", description="Request latency in ms"
)

transactions_created_total = meter.create_counter(
    "transactions_created_total", description="Transactions created by channel"
)
status_transitions_total = meter.create_counter(
    "status_transitions_total", description="Status transitions by target status"
)
rate_fetch_errors_total = meter.create_counter(
    "rate_fetch_errors_total", description="Failed exchange rate fetches"
)
stale_quotes_total = meter.create_counter(
    "stale_quotes_total", description="Quotes served from last-known or fallback rates"
)
rate_fetch_duration = meter.create_histogram(
    "rate_fetch_duration_ms", description="Exchange rate fetch duration in ms"
)
admin_auth_failures_total = meter.create_counter(
    "admin_auth_failures_total", description="Rejected admin requests"
)
