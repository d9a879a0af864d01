from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from hubp2p_worker.change_feed.contracts import ChangeFeedPublisher
from hubp2p_worker.core.errors import ChangeFeedError
from hubp2p_worker.core.metrics import status_relays_total
from hubp2p_worker.repositories.outbox_repository import OutboxRepository
from shared.contracts import OutboxEventORM, TransactionStatusChangedPayload
from shared.logging import STATUS, TRANSACTION_ID, get_logger
from shared.resilience.backoff import exponential_backoff

logger = get_logger(__name__)


class RelayStatusChangeCommand:
    def __init__(self, publisher: ChangeFeedPublisher, *, max_attempts: int) -> None:
        self._publisher = publisher
        self._max_attempts = max_attempts

    async def execute(self, session: AsyncSession, event: OutboxEventORM) -> bool:
        change = TransactionStatusChangedPayload.model_validate(event.payload)
        outbox_repo = OutboxRepository(session)
        attempts = event.attempts + 1
        try:
            await self._publisher.publish(change)
        except ChangeFeedError as exc:
            await self._handle_failure(outbox_repo, event, attempts, exc)
            await session.commit()
            return False

        await outbox_repo.mark_sent(event.event_id, attempts)
        await session.commit()
        status_relays_total.add(1, {"status": change.status.value})
        return True

    async def _handle_failure(
        self,
        outbox_repo: OutboxRepository,
        event: OutboxEventORM,
        attempts: int,
        error: ChangeFeedError,
    ) -> None:
        fields = {
            TRANSACTION_ID: str(event.aggregate_id),
            STATUS: event.payload.get("status"),
            "attempts": attempts,
            "error": error.message,
        }
        if attempts >= self._max_attempts:
            logger.error("status_relay_abandoned", extra={"extra_fields": fields})
            await outbox_repo.mark_failed(event.event_id, attempts)
            return
        logger.warning("status_relay_rescheduled", extra={"extra_fields": fields})
        delay = exponential_backoff(attempts, base_seconds=0.5, cap_seconds=5.0)
        await outbox_repo.reschedule(event.event_id, attempts=attempts, delay_seconds=delay)
