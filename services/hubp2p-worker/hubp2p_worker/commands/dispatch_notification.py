from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from hubp2p_worker.notifications.dispatcher import DispatchResult, NotificationDispatcher
from hubp2p_worker.repositories.outbox_repository import OutboxRepository
from shared.contracts import NotificationRequestedPayload, OutboxEventORM


class DispatchNotificationCommand:
    """Delivers a NotificationRequested event exactly once.

    Pushover handles retries for emergency alerts, so the outbox event is closed after a
    single attempt and the outcome lives in the notification log.
    """

    def __init__(self, dispatcher: NotificationDispatcher) -> None:
        self._dispatcher = dispatcher

    async def execute(self, session: AsyncSession, event: OutboxEventORM) -> DispatchResult:
        request = NotificationRequestedPayload.model_validate(event.payload)
        result = await self._dispatcher.notify(session, request.transaction_id, request.kind)
        outbox_repo = OutboxRepository(session)
        attempts = event.attempts + 1
        if result.success:
            await outbox_repo.mark_sent(event.event_id, attempts)
        else:
            await outbox_repo.mark_failed(event.event_id, attempts)
        await session.commit()
        return result
