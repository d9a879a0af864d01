from __future__ import annotations

from collections.abc import Collection
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import (
    EventType,
    OutboxEventORM,
    OutboxStatus,
    TransactionStatusChangedPayload,
)
from shared.utils.ids import new_uuid
from shared.utils.time import ensure_aware, utc_now


class OutboxRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def fetch_pending(
        self, event_types: Collection[EventType], limit: int
    ) -> list[OutboxEventORM]:
        stmt = (
            select(OutboxEventORM)
            .where(
                OutboxEventORM.event_type.in_(list(event_types)),
                OutboxEventORM.status == OutboxStatus.PENDING,
                OutboxEventORM.next_attempt_at <= utc_now(),
            )
            .order_by(OutboxEventORM.created_at)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def mark_sent(self, event_id: UUID, attempts: int) -> None:
        stmt = (
            update(OutboxEventORM)
            .where(OutboxEventORM.event_id == event_id)
            .values(status=OutboxStatus.SENT, attempts=attempts)
        )
        await self._session.execute(stmt)

    async def mark_failed(self, event_id: UUID, attempts: int) -> None:
        stmt = (
            update(OutboxEventORM)
            .where(OutboxEventORM.event_id == event_id)
            .values(status=OutboxStatus.FAILED, attempts=attempts)
        )
        await self._session.execute(stmt)

    async def reschedule(self, event_id: UUID, attempts: int, delay_seconds: float) -> None:
        next_attempt_at = utc_now() + timedelta(seconds=delay_seconds)
        stmt = (
            update(OutboxEventORM)
            .where(OutboxEventORM.event_id == event_id)
            .values(attempts=attempts, next_attempt_at=next_attempt_at)
        )
        await self._session.execute(stmt)

    def add_status_change(self, change: TransactionStatusChangedPayload) -> OutboxEventORM:
        now = utc_now()
        event = OutboxEventORM(
            event_id=new_uuid(),
            aggregate_id=change.transaction_id,
            event_type=EventType.TRANSACTION_STATUS_CHANGED,
            payload=change.model_dump(mode="json"),
            status=OutboxStatus.PENDING,
            attempts=0,
            created_at=now,
            next_attempt_at=now,
        )
        self._session.add(event)
        return event

    async def backlog_size(self) -> int:
        stmt = (
            select(func.count())
            .select_from(OutboxEventORM)
            .where(OutboxEventORM.status == OutboxStatus.PENDING)
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def oldest_pending_lag_seconds(self, now: datetime | None = None) -> float:
        stmt = select(func.min(OutboxEventORM.created_at)).where(
            OutboxEventORM.status == OutboxStatus.PENDING
        )
        result = await self._session.execute(stmt)
        oldest = result.scalar_one_or_none()
        if not oldest:
            return 0.0
        reference = now or utc_now()
        return max(0.0, (reference - ensure_aware(oldest)).total_seconds())
