from shared.logging.fields import (
    ADMIN_ID,
    CHANNEL,
    NOTIFICATION_KIND,
    PAYMENT_ACCOUNT_ID,
    PREVIOUS_STATUS,
    RATE_SOURCE,
    STATUS,
    TRACE_ID,
    TRANSACTION_ID,
    TRANSACTION_NUMBER,
    USER_ID,
)
from shared.logging.logger import (
    clear_correlation_context,
    configure_logging,
    get_correlation_context,
    get_logger,
    set_correlation_context,
    update_correlation_context,
)
from shared.logging.middleware import CorrelationMiddleware

__all__ = [
    "ADMIN_ID",
    "CHANNEL",
    "CorrelationMiddleware",
    "NOTIFICATION_KIND",
    "PAYMENT_ACCOUNT_ID",
    "PREVIOUS_STATUS",
    "RATE_SOURCE",
    "STATUS",
    "TRACE_ID",
    "TRANSACTION_ID",
    "TRANSACTION_NUMBER",
    "USER_ID",
    "clear_correlation_context",
    "configure_logging",
    "get_correlation_context",
    "get_logger",
    "set_correlation_context",
    "update_correlation_context",
]
