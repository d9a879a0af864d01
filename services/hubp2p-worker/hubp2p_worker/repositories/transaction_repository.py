from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import ProfileORM, TransactionORM, TransactionStatus


class TransactionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_with_owner(
        self, transaction_id: UUID
    ) -> tuple[TransactionORM, ProfileORM | None] | None:
        stmt = (
            select(TransactionORM, ProfileORM)
            .outerjoin(ProfileORM, ProfileORM.id == TransactionORM.user_id)
            .where(TransactionORM.id == transaction_id)
        )
        row = (await self._session.execute(stmt)).first()
        if row is None:
            return None
        return row[0], row[1]

    async def list_overdue_pending(self, now: datetime, limit: int) -> list[TransactionORM]:
        stmt = (
            select(TransactionORM)
            .where(
                TransactionORM.status == TransactionStatus.PENDING_PAYMENT,
                TransactionORM.expires_at <= now,
            )
            .order_by(TransactionORM.expires_at)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def mark_expired(self, transaction: TransactionORM, now: datetime) -> bool:
        stmt = (
            update(TransactionORM)
            .where(
                TransactionORM.id == transaction.id,
                TransactionORM.status == TransactionStatus.PENDING_PAYMENT,
                TransactionORM.version == transaction.version,
            )
            .values(
                status=TransactionStatus.EXPIRED,
                updated_at=now,
                version=transaction.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return getattr(result, "rowcount", 0) == 1
