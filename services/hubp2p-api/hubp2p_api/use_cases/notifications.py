from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hubp2p_api.core.errors import NotFoundError
from hubp2p_api.db.guards import store_write
from hubp2p_api.repositories.notification_log_repository import NotificationLogRepository
from hubp2p_api.repositories.outbox_repository import OutboxRepository
from hubp2p_api.repositories.transaction_repository import TransactionRepository
from shared.contracts import (
    NotificationEnqueuedResponse,
    NotificationKind,
    NotificationLogResponse,
    NotificationStatus,
)
from shared.logging import NOTIFICATION_KIND, TRANSACTION_ID, get_logger

logger = get_logger(__name__)


class RequestNotificationUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(
        self, transaction_id: UUID, kind: NotificationKind = NotificationKind.STATUS_UPDATE
    ) -> NotificationEnqueuedResponse:
        async with self._session_factory() as session:
            if await TransactionRepository(session).get_by_id(transaction_id) is None:
                raise NotFoundError("Transaction not found")
            async with store_write(session, "request_notification"):
                event = OutboxRepository(session).add_notification_request(transaction_id, kind)
                await session.commit()
        logger.info(
            "notification_requested",
            extra={
                "extra_fields": {TRANSACTION_ID: str(transaction_id), NOTIFICATION_KIND: kind.value}
            },
        )
        return NotificationEnqueuedResponse(
            transaction_id=transaction_id, kind=kind, event_id=event.event_id
        )


class ListNotificationsUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(
        self,
        *,
        transaction_id: UUID | None,
        status: NotificationStatus | None,
        limit: int,
    ) -> list[NotificationLogResponse]:
        async with self._session_factory() as session:
            logs = await NotificationLogRepository(session).list_recent(
                transaction_id=transaction_id, status=status, limit=limit
            )
        return [NotificationLogResponse.model_validate(log) for log in logs]
