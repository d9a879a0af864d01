from __future__ import annotations

TRACE_ID = "hubp2p.trace_id"
TRANSACTION_ID = "hubp2p.transaction_id"
TRANSACTION_NUMBER = "hubp2p.transaction_number"
CHANNEL = "hubp2p.channel"
STATUS = "hubp2p.status"
RATE_SOURCE = "hubp2p.rate_source"
NOTIFICATION_KIND = "hubp2p.notification_kind"
