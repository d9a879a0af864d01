from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from shared.contracts import (
    CryptoNetwork,
    PaymentMethod,
    ProfileORM,
    TransactionChannel,
    TransactionORM,
    TransactionStatus,
    TransactionStatusChangedPayload,
)

FIXED_NOW = datetime(2026, 3, 14, 12, 0, tzinfo=UTC)


def make_transaction(**overrides: Any) -> TransactionORM:
    created_at = overrides.pop("created_at", FIXED_NOW)
    values: dict[str, Any] = {
        "id": uuid4(),
        "transaction_number": "TXN-20260314-000001",
        "channel": TransactionChannel.USER,
        "user_id": "user-1",
        "amount_brl": Decimal("1000.00"),
        "amount_usd": Decimal("167.57"),
        "exchange_rate": Decimal("5.967600"),
        "crypto_amount": None,
        "crypto_network": CryptoNetwork.ETHEREUM,
        "wallet_address": "0x" + "ab" * 20,
        "payment_method": PaymentMethod.PIX,
        "payment_account_id": uuid4(),
        "pix_key": "pix@hubp2p.test",
        "pix_key_holder": "HubP2P",
        "status": TransactionStatus.PENDING_PAYMENT,
        "created_at": created_at,
        "updated_at": created_at,
        "expires_at": created_at + timedelta(minutes=40),
        "version": 1,
    }
    values.update(overrides)
    return TransactionORM(**values)


def make_profile(**overrides: Any) -> ProfileORM:
    values: dict[str, Any] = {
        "id": "user-1",
        "full_name": "Maria Silva",
        "email": "maria@example.com",
        "created_at": FIXED_NOW,
    }
    values.update(overrides)
    return ProfileORM(**values)


def make_status_change(
    transaction_id: UUID,
    status: TransactionStatus,
    version: int,
    *,
    previous_status: TransactionStatus | None = None,
) -> TransactionStatusChangedPayload:
    return TransactionStatusChangedPayload(
        transaction_id=transaction_id,
        transaction_number="TXN-20260314-000001",
        previous_status=previous_status,
        status=status,
        updated_at=FIXED_NOW,
        version=version,
    )


def make_user_transaction_payload(
    *,
    amount_brl: str = "1000.00",
    crypto_network: CryptoNetwork = CryptoNetwork.ETHEREUM,
    payment_method: PaymentMethod = PaymentMethod.PIX,
) -> dict[str, str]:
    return {
        "amount_brl": amount_brl,
        "crypto_network": crypto_network.value,
        "wallet_address": "0x" + "ab" * 20,
        "payment_method": payment_method.value,
    }
