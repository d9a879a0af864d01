from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import (
    NotificationKind,
    NotificationLogORM,
    NotificationStatus,
    NotificationType,
)


class NotificationLogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def add(
        self,
        *,
        transaction_id: UUID | None,
        kind: NotificationKind,
        recipient: str,
        title: str | None,
        message: str,
        status: NotificationStatus,
        sent_at: datetime,
        error_message: str | None = None,
        provider_reference: str | None = None,
    ) -> NotificationLogORM:
        entry = NotificationLogORM(
            transaction_id=transaction_id,
            type=NotificationType.PUSHOVER,
            kind=kind,
            recipient=recipient,
            title=title,
            message=message,
            status=status,
            error_message=error_message[:512] if error_message else None,
            provider_reference=provider_reference,
            sent_at=sent_at,
        )
        self._session.add(entry)
        return entry
