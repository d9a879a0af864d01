from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_CENTS = Decimal("0.01")


def format_brl(amount: Decimal) -> str:
    quantized = amount.quantize(_CENTS, rounding=ROUND_HALF_UP)
    grouped = f"{quantized:,.2f}"
    return "R$ " + grouped.replace(",", "_").replace(".", ",").replace("_", ".")


def format_usd(amount: Decimal) -> str:
    return f"US$ {amount.quantize(_CENTS, rounding=ROUND_HALF_UP):,.2f}"


def mask_identifier(value: str | None, *, visible: int = 4) -> str:
    if not value:
        return ""
    if len(value) <= visible * 2:
        return "*" * len(value)
    return f"{value[:visible]}...{value[-visible:]}"
