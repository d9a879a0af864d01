from __future__ import annotations

import pytest

from shared.constants import (
    allowed_next_statuses,
    can_transition,
    is_terminal,
    network_allowed_for_channel,
    networks_for_channel,
    non_terminal_statuses,
    settlement_symbol_for_network,
    status_label,
    wallet_address_matches_network,
)
from shared.contracts import CryptoNetwork, TransactionChannel, TransactionStatus


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (TransactionStatus.PENDING_PAYMENT, TransactionStatus.PAYMENT_RECEIVED),
        (TransactionStatus.PENDING_PAYMENT, TransactionStatus.EXPIRED),
        (TransactionStatus.PENDING_PAYMENT, TransactionStatus.CANCELLED),
        (TransactionStatus.PAYMENT_RECEIVED, TransactionStatus.CONVERTING),
        (TransactionStatus.PAYMENT_RECEIVED, TransactionStatus.SENT),
        (TransactionStatus.CONVERTING, TransactionStatus.SENT),
        (TransactionStatus.CONVERTING, TransactionStatus.CANCELLED),
    ],
)
def test_allowed_edges(current: TransactionStatus, target: TransactionStatus) -> None:
    assert can_transition(current, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (TransactionStatus.PENDING_PAYMENT, TransactionStatus.SENT),
        (TransactionStatus.PENDING_PAYMENT, TransactionStatus.CONVERTING),
        (TransactionStatus.PAYMENT_RECEIVED, TransactionStatus.EXPIRED),
        (TransactionStatus.CONVERTING, TransactionStatus.PAYMENT_RECEIVED),
        (TransactionStatus.SENT, TransactionStatus.CANCELLED),
        (TransactionStatus.EXPIRED, TransactionStatus.PAYMENT_RECEIVED),
    ],
)
def test_rejected_edges(current: TransactionStatus, target: TransactionStatus) -> None:
    assert not can_transition(current, target)


def test_terminal_statuses_have_no_exits() -> None:
    for status in (TransactionStatus.SENT, TransactionStatus.CANCELLED, TransactionStatus.EXPIRED):
        assert is_terminal(status)
        assert allowed_next_statuses(status) == frozenset()

    assert set(non_terminal_statuses()) == {
        TransactionStatus.PENDING_PAYMENT,
        TransactionStatus.PAYMENT_RECEIVED,
        TransactionStatus.CONVERTING,
    }
    assert status_label(TransactionStatus.SENT) == "Crypto sent"


def test_user_channel_only_offers_its_networks() -> None:
    assert set(networks_for_channel(TransactionChannel.USER)) == {
        CryptoNetwork.BITCOIN,
        CryptoNetwork.ETHEREUM,
        CryptoNetwork.SOLANA,
    }
    assert not network_allowed_for_channel(CryptoNetwork.TRON, TransactionChannel.USER)
    assert network_allowed_for_channel(CryptoNetwork.TRON, TransactionChannel.API)


def test_settlement_symbol_and_address_patterns() -> None:
    assert settlement_symbol_for_network(CryptoNetwork.BITCOIN) == "BTC"
    assert settlement_symbol_for_network(CryptoNetwork.POLYGON) == "USDT"
    assert wallet_address_matches_network(CryptoNetwork.ETHEREUM, "0x" + "a1" * 20)
    assert not wallet_address_matches_network(CryptoNetwork.ETHEREUM, "0x123")
    assert wallet_address_matches_network(
        CryptoNetwork.TRON, "TLa2f6VPqDgRE67v1736s7bJ8Ray5wYjU7"
    )
