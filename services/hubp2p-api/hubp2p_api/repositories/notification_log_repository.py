from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import NotificationLogORM, NotificationStatus


class NotificationLogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_recent(
        self,
        *,
        transaction_id: UUID | None = None,
        status: NotificationStatus | None = None,
        limit: int = 50,
    ) -> list[NotificationLogORM]:
        stmt = select(NotificationLogORM).order_by(NotificationLogORM.sent_at.desc()).limit(limit)
        if transaction_id is not None:
            stmt = stmt.where(NotificationLogORM.transaction_id == transaction_id)
        if status is not None:
            stmt = stmt.where(NotificationLogORM.status == status)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
