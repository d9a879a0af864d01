from __future__ import annotations

import asyncio

from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hubp2p_worker.commands.dispatch_notification import DispatchNotificationCommand
from hubp2p_worker.commands.relay_status_change import RelayStatusChangeCommand
from hubp2p_worker.core.config import Settings
from hubp2p_worker.core.metrics import outbox_backlog, outbox_lag_seconds
from hubp2p_worker.repositories.outbox_repository import OutboxRepository
from shared.contracts import EventType, OutboxEventORM
from shared.logging import TRANSACTION_ID, get_logger
from shared.observability import attributes as otel_attrs
from shared.observability import context_from_traceparent

logger = get_logger(__name__)

_HANDLED_EVENT_TYPES = (EventType.NOTIFICATION_REQUESTED, EventType.TRANSACTION_STATUS_CHANGED)


class OutboxWorker:
    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        dispatch_command: DispatchNotificationCommand,
        relay_command: RelayStatusChangeCommand,
    ) -> None:
        self._settings = settings
        self._session_factory = session_factory
        self._dispatch_command = dispatch_command
        self._relay_command = relay_command
        self._tracer = trace.get_tracer(__name__)

    async def run_forever(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "worker_iteration_failed",
                    extra={"extra_fields": {"error_type": type(exc).__name__}},
                )
            await asyncio.sleep(self._settings.poll_interval_seconds)

    async def run_once(self) -> int:
        async with self._session_factory() as session:
            outbox_repo = OutboxRepository(session)
            outbox_backlog.record(await outbox_repo.backlog_size())
            outbox_lag_seconds.record(await outbox_repo.oldest_pending_lag_seconds())
            events = await outbox_repo.fetch_pending(_HANDLED_EVENT_TYPES, self._settings.batch_size)
            processed = 0
            for event in events:
                processed += 1
                if not await self._process_event(session, event):
                    # the rollback expired the rest of the batch; the next poll picks it up
                    break
            return processed

    async def _process_event(self, session: AsyncSession, event: OutboxEventORM) -> bool:
        event_id, attempts = event.event_id, event.attempts
        aggregate_id, event_type = event.aggregate_id, event.event_type
        traceparent = event.payload.get("traceparent")
        with self._tracer.start_as_current_span(
            "outbox_process", context=context_from_traceparent(traceparent)
        ) as span:
            span.set_attribute(otel_attrs.TRANSACTION_ID, str(aggregate_id))
            try:
                if event_type == EventType.NOTIFICATION_REQUESTED:
                    span.set_attribute(otel_attrs.NOTIFICATION_KIND, str(event.payload.get("kind")))
                    await self._dispatch_command.execute(session, event)
                else:
                    span.set_attribute(otel_attrs.STATUS, str(event.payload.get("status")))
                    await self._relay_command.execute(session, event)
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "outbox_event_failed",
                    extra={
                        "extra_fields": {
                            TRANSACTION_ID: str(aggregate_id),
                            "event_type": event_type.value,
                            "error_type": type(exc).__name__,
                        }
                    },
                )
                await session.rollback()
                await OutboxRepository(session).mark_failed(event_id, attempts + 1)
                await session.commit()
                return False
        return True
