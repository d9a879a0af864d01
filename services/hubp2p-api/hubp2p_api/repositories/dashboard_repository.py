from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import TransactionORM, TransactionStatus


class DashboardRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def created_since(self, since: datetime) -> tuple[int, Decimal]:
        stmt = select(
            func.count(), func.coalesce(func.sum(TransactionORM.amount_brl), 0)
        ).where(TransactionORM.created_at >= since)
        count, total = (await self._session.execute(stmt)).one()
        return int(count), Decimal(str(total))

    async def count_by_status(self, status: TransactionStatus) -> int:
        stmt = select(func.count()).where(TransactionORM.status == status)
        return int((await self._session.execute(stmt)).scalar_one())

    async def count_sent_since(self, since: datetime) -> int:
        stmt = select(func.count()).where(
            TransactionORM.status == TransactionStatus.SENT,
            TransactionORM.crypto_sent_at >= since,
        )
        return int((await self._session.execute(stmt)).scalar_one())

    async def volume_points_since(self, since: datetime) -> list[tuple[datetime, Decimal]]:
        stmt = (
            select(TransactionORM.created_at, TransactionORM.amount_brl)
            .where(TransactionORM.created_at >= since)
            .order_by(TransactionORM.created_at)
        )
        rows = (await self._session.execute(stmt)).all()
        return [(row[0], row[1]) for row in rows]
