from shared.constants.crypto_networks import (
    get_network_profile,
    network_allowed_for_channel,
    networks_for_channel,
    settlement_symbol_for_network,
    wallet_address_matches_network,
)
from shared.constants.redis_keys import (
    TRANSACTION_CHANNEL_PREFIX,
    rate_cache_key,
    rate_last_known_key,
    transaction_channel,
)
from shared.constants.transaction_lifecycle import (
    INITIAL_STATUS,
    STATUSES_ALLOWED_AFTER_EXPIRY,
    STATUSES_REQUIRING_TX_HASH,
    allowed_next_statuses,
    can_transition,
    get_status_profile,
    is_terminal,
    non_terminal_statuses,
    status_label,
    status_rank,
)

__all__ = [
    "INITIAL_STATUS",
    "STATUSES_ALLOWED_AFTER_EXPIRY",
    "STATUSES_REQUIRING_TX_HASH",
    "TRANSACTION_CHANNEL_PREFIX",
    "allowed_next_statuses",
    "can_transition",
    "get_network_profile",
    "get_status_profile",
    "is_terminal",
    "network_allowed_for_channel",
    "networks_for_channel",
    "non_terminal_statuses",
    "rate_cache_key",
    "rate_last_known_key",
    "settlement_symbol_for_network",
    "status_label",
    "status_rank",
    "transaction_channel",
    "wallet_address_matches_network",
]
