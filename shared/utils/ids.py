from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from shared.contracts import TransactionChannel

_TRANSACTION_PREFIXES = {
    TransactionChannel.USER: "TXN",
    TransactionChannel.API: "API",
}
_SEQUENCE_WIDTH = 6


def new_uuid() -> UUID:
    return uuid4()


def format_transaction_number(
    channel: TransactionChannel, created_at: datetime, sequence_value: int
) -> str:
    prefix = _TRANSACTION_PREFIXES[channel]
    return f"{prefix}-{created_at:%Y%m%d}-{sequence_value:0{_SEQUENCE_WIDTH}d}"


def parse_uuid(value: str) -> UUID | None:
    try:
        return UUID(value)
    except (TypeError, ValueError):
        return None
