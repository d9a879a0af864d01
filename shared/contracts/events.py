from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from shared.contracts.enums import NotificationKind, TransactionStatus


class NotificationRequestedPayload(BaseModel):
    transaction_id: UUID
    kind: NotificationKind
    trace_id: str
    traceparent: str | None = None


class TransactionStatusChangedPayload(BaseModel):
    transaction_id: UUID
    transaction_number: str
    previous_status: TransactionStatus | None = None
    status: TransactionStatus
    updated_at: datetime
    version: int

    model_config = ConfigDict(extra="forbid")
