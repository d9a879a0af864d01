from __future__ import annotations

from collections.abc import Collection
from datetime import date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import KycStatus, KycVerificationORM


class KycRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def create(
        self,
        *,
        user_id: str,
        full_name: str,
        document_type: str,
        document_number: str,
        birth_date: date | None,
        now: datetime,
    ) -> KycVerificationORM:
        entity = KycVerificationORM(
            user_id=user_id,
            status=KycStatus.PENDING,
            full_name=full_name,
            document_type=document_type,
            document_number=document_number,
            birth_date=birth_date,
            created_at=now,
            updated_at=now,
        )
        self._session.add(entity)
        return entity

    async def get(self, verification_id: UUID) -> KycVerificationORM | None:
        stmt = select(KycVerificationORM).where(KycVerificationORM.id == verification_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def latest_for_user(self, user_id: str) -> KycVerificationORM | None:
        stmt = (
            select(KycVerificationORM)
            .where(KycVerificationORM.user_id == user_id)
            .order_by(KycVerificationORM.updated_at.desc(), KycVerificationORM.created_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_status(
        self, status: KycStatus | None, *, limit: int = 100
    ) -> list[KycVerificationORM]:
        stmt = select(KycVerificationORM).order_by(KycVerificationORM.created_at.desc()).limit(limit)
        if status is not None:
            stmt = stmt.where(KycVerificationORM.status == status)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def update_status(
        self,
        verification_id: UUID,
        *,
        allowed_from: Collection[KycStatus],
        values: dict[str, Any],
    ) -> bool:
        stmt = (
            update(KycVerificationORM)
            .where(
                KycVerificationORM.id == verification_id,
                KycVerificationORM.status.in_(list(allowed_from)),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return getattr(result, "rowcount", 0) == 1
