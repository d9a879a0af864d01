from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import (
    EventType,
    NotificationKind,
    NotificationRequestedPayload,
    OutboxEventORM,
    OutboxStatus,
    TransactionStatusChangedPayload,
)
from shared.observability import current_trace_id, current_traceparent
from shared.utils.ids import new_uuid
from shared.utils.time import utc_now


class OutboxRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def add_event(
        self, *, aggregate_id: UUID, event_type: EventType, payload: dict
    ) -> OutboxEventORM:
        now = utc_now()
        event = OutboxEventORM(
            event_id=new_uuid(),
            aggregate_id=aggregate_id,
            event_type=event_type,
            payload=payload,
            status=OutboxStatus.PENDING,
            attempts=0,
            created_at=now,
            next_attempt_at=now,
        )
        self._session.add(event)
        return event

    def add_notification_request(
        self, transaction_id: UUID, kind: NotificationKind
    ) -> OutboxEventORM:
        payload = NotificationRequestedPayload(
            transaction_id=transaction_id,
            kind=kind,
            trace_id=current_trace_id(),
            traceparent=current_traceparent(),
        ).model_dump(mode="json")
        return self.add_event(
            aggregate_id=transaction_id,
            event_type=EventType.NOTIFICATION_REQUESTED,
            payload=payload,
        )

    def add_status_change(self, change: TransactionStatusChangedPayload) -> OutboxEventORM:
        return self.add_event(
            aggregate_id=change.transaction_id,
            event_type=EventType.TRANSACTION_STATUS_CHANGED,
            payload=change.model_dump(mode="json"),
        )
