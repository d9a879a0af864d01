from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from hubp2p_api.core.errors import (
    InvalidTransitionError,
    TransactionExpiredError,
    ValidationAppError,
)
from shared.constants import (
    STATUSES_ALLOWED_AFTER_EXPIRY,
    STATUSES_REQUIRING_TX_HASH,
    can_transition,
)
from shared.contracts import TransactionORM, TransactionStatus, TransactionStatusChangedPayload
from shared.utils.time import ensure_aware


@dataclass(frozen=True)
class TransitionPlan:
    transaction_id: UUID
    from_status: TransactionStatus
    to_status: TransactionStatus
    expected_version: int
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def next_version(self) -> int:
        return self.expected_version + 1


def is_past_deadline(transaction: TransactionORM, now: datetime) -> bool:
    return (
        transaction.status == TransactionStatus.PENDING_PAYMENT
        and ensure_aware(transaction.expires_at) <= now
    )


class LifecycleService:
    def plan_transition(
        self,
        transaction: TransactionORM,
        target: TransactionStatus,
        *,
        now: datetime,
        tx_hash: str | None = None,
        admin_notes: str | None = None,
        crypto_amount: Decimal | None = None,
    ) -> TransitionPlan:
        current = transaction.status
        if not can_transition(current, target):
            raise InvalidTransitionError(current, target)
        past_deadline = is_past_deadline(transaction, now)
        if past_deadline and target not in STATUSES_ALLOWED_AFTER_EXPIRY:
            raise TransactionExpiredError()
        # expiry only happens once the payment window has elapsed
        if target == TransactionStatus.EXPIRED and not past_deadline:
            raise InvalidTransitionError(current, target)
        if target in STATUSES_REQUIRING_TX_HASH and not tx_hash:
            raise ValidationAppError(f"tx_hash is required to mark a transaction as {target.value}")

        values: dict[str, Any] = {"status": target, "updated_at": now}
        if target == TransactionStatus.PAYMENT_RECEIVED:
            values["payment_confirmed_at"] = now
        if target == TransactionStatus.SENT:
            values["crypto_sent_at"] = now
        if tx_hash and target in STATUSES_REQUIRING_TX_HASH:
            values["tx_hash"] = tx_hash
        if crypto_amount is not None:
            values["crypto_amount"] = crypto_amount
        if admin_notes is not None:
            values["admin_notes"] = admin_notes

        return TransitionPlan(
            transaction_id=transaction.id,
            from_status=current,
            to_status=target,
            expected_version=transaction.version,
            values=values,
        )

    def status_changed_payload(
        self, transaction: TransactionORM, plan: TransitionPlan
    ) -> TransactionStatusChangedPayload:
        return TransactionStatusChangedPayload(
            transaction_id=plan.transaction_id,
            transaction_number=transaction.transaction_number,
            previous_status=plan.from_status,
            status=plan.to_status,
            updated_at=plan.values["updated_at"],
            version=plan.next_version,
        )
