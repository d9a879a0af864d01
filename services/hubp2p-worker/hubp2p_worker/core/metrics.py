from __future__ import annotations

from opentelemetry import metrics

meter = metrics.get_meter("hubp2p-worker")
outbox_backlog = meter.create_histogram(
    "hubp2p_worker_outbox_backlog", description="Outbox backlog size snapshots"
)
outbox_lag_seconds = meter.create_histogram(
    "hubp2p_worker_outbox_lag_seconds", description="Outbox processing lag"
)
notifications_total = meter.create_counter(
    "hubp2p_worker_notifications_total", description="Notifications dispatched by outcome"
)
pushover_latency = meter.create_histogram(
    "hubp2p_worker_pushover_latency_ms", description="Pushover call latency"
)
status_relays_total = meter.create_counter(
    "hubp2p_worker_status_relays_total", description="Status changes relayed to the change feed"
)
transactions_expired_total = meter.create_counter(
    "hubp2p_worker_transactions_expired_total", description="Transactions expired by the sweep"
)
