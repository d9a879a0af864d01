from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from shared.contracts import TransactionChannel
from shared.utils import (
    blank_to_none,
    format_brl,
    format_transaction_number,
    format_usd,
    mask_identifier,
    parse_uuid,
)
from tests.helpers import FIXED_NOW


def test_format_brl_uses_brazilian_separators() -> None:
    assert format_brl(Decimal("1234.56")) == "R$ 1.234,56"
    assert format_brl(Decimal("100")) == "R$ 100,00"
    assert format_brl(Decimal("1000000.005")) == "R$ 1.000.000,01"


def test_format_usd_rounds_half_up() -> None:
    assert format_usd(Decimal("16.755")) == "US$ 16.76"


def test_mask_identifier_keeps_edges_visible() -> None:
    assert mask_identifier("0x" + "ab" * 20, visible=6) == "0xabab...ababab"
    assert mask_identifier("12345678") == "********"
    assert mask_identifier(None) == ""


def test_transaction_number_uses_channel_prefix_and_padded_sequence() -> None:
    user_number = format_transaction_number(TransactionChannel.USER, FIXED_NOW, 42)
    api_number = format_transaction_number(TransactionChannel.API, FIXED_NOW, 7)

    assert user_number == "TXN-20260314-000042"
    assert api_number == "API-20260314-000007"


def test_parse_uuid_returns_none_for_invalid_values() -> None:
    assert parse_uuid("TXN-20260314-000042") is None
    assert parse_uuid("8d7f3c1e-0a4b-4c55-9e2a-0c3f5b7d9e11") == UUID(
        "8d7f3c1e-0a4b-4c55-9e2a-0c3f5b7d9e11"
    )


def test_blank_to_none_strips_whitespace() -> None:
    assert blank_to_none("   ") is None
    assert blank_to_none(None) is None
    assert blank_to_none("  nota ") == "nota"
