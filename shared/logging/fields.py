from __future__ import annotations

TRACE_ID = "trace_id"
USER_ID = "user_id"
ADMIN_ID = "admin_id"
TRANSACTION_ID = "transaction_id"
TRANSACTION_NUMBER = "transaction_number"
CHANNEL = "channel"
STATUS = "status"
PREVIOUS_STATUS = "previous_status"
PAYMENT_ACCOUNT_ID = "payment_account_id"
NOTIFICATION_KIND = "notification_kind"
RATE_SOURCE = "rate_source"
