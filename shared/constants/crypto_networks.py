from __future__ import annotations

import re
from dataclasses import dataclass

from shared.contracts import CryptoNetwork, TransactionChannel

_EVM_ADDRESS = re.compile(r"^0x[a-fA-F0-9]{40}$")
_BASE58 = "1-9A-HJ-NP-Za-km-z"


@dataclass(frozen=True)
class NetworkProfile:
    network: CryptoNetwork
    label: str
    settlement_symbol: str
    channels: frozenset[TransactionChannel]
    address_pattern: re.Pattern[str]


_ALL_CHANNELS = frozenset({TransactionChannel.USER, TransactionChannel.API})
_API_ONLY = frozenset({TransactionChannel.API})

_NETWORK_PROFILES = {
    CryptoNetwork.BITCOIN: NetworkProfile(
        network=CryptoNetwork.BITCOIN,
        label="Bitcoin (BTC)",
        settlement_symbol="BTC",
        channels=_ALL_CHANNELS,
        address_pattern=re.compile(
            rf"^(bc1[ac-hj-np-z02-9]{{11,71}}|[13][{_BASE58}]{{25,34}})$"
        ),
    ),
    CryptoNetwork.ETHEREUM: NetworkProfile(
        network=CryptoNetwork.ETHEREUM,
        label="Ethereum (ERC-20)",
        settlement_symbol="USDT",
        channels=_ALL_CHANNELS,
        address_pattern=_EVM_ADDRESS,
    ),
    CryptoNetwork.POLYGON: NetworkProfile(
        network=CryptoNetwork.POLYGON,
        label="Polygon",
        settlement_symbol="USDT",
        channels=_API_ONLY,
        address_pattern=_EVM_ADDRESS,
    ),
    CryptoNetwork.BSC: NetworkProfile(
        network=CryptoNetwork.BSC,
        label="Binance Smart Chain (BEP-20)",
        settlement_symbol="USDT",
        channels=_API_ONLY,
        address_pattern=_EVM_ADDRESS,
    ),
    CryptoNetwork.SOLANA: NetworkProfile(
        network=CryptoNetwork.SOLANA,
        label="Solana (SPL)",
        settlement_symbol="USDT",
        channels=_ALL_CHANNELS,
        address_pattern=re.compile(rf"^[{_BASE58}]{{32,44}}$"),
    ),
    CryptoNetwork.TRON: NetworkProfile(
        network=CryptoNetwork.TRON,
        label="Tron (TRC-20)",
        settlement_symbol="USDT",
        channels=_API_ONLY,
        address_pattern=re.compile(rf"^T[{_BASE58}]{{33}}$"),
    ),
}


def get_network_profile(network: CryptoNetwork) -> NetworkProfile:
    return _NETWORK_PROFILES[network]


def network_allowed_for_channel(network: CryptoNetwork, channel: TransactionChannel) -> bool:
    return channel in get_network_profile(network).channels


def settlement_symbol_for_network(network: CryptoNetwork) -> str:
    return get_network_profile(network).settlement_symbol


def wallet_address_matches_network(network: CryptoNetwork, address: str) -> bool:
    return bool(get_network_profile(network).address_pattern.match(address))


def networks_for_channel(channel: TransactionChannel) -> tuple[CryptoNetwork, ...]:
    return tuple(
        network for network, profile in _NETWORK_PROFILES.items() if channel in profile.channels
    )
