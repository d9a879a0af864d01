from __future__ import annotations

from uuid import UUID

TRANSACTION_CHANNEL_PREFIX = "hubp2p:transactions"


def rate_cache_key(symbol: str) -> str:
    return f"rates:live:{symbol}"


def rate_last_known_key(symbol: str) -> str:
    return f"rates:last_known:{symbol}"


def transaction_channel(transaction_id: UUID | str) -> str:
    return f"{TRANSACTION_CHANNEL_PREFIX}:{transaction_id}"
