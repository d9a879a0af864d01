from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import PaymentAccountORM, PaymentMethod, TransactionChannel


@dataclass(frozen=True)
class PaymentAccountCreateData:
    pool: TransactionChannel
    account_type: PaymentMethod
    pix_key: str | None
    pix_key_holder: str | None
    pix_qr_code: str | None
    bank_name: str | None
    bank_code: str | None
    account_holder: str | None
    account_agency: str | None
    account_number: str | None
    created_at: datetime


class PaymentAccountRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def create(self, data: PaymentAccountCreateData) -> PaymentAccountORM:
        entity = PaymentAccountORM(
            pool=data.pool,
            account_type=data.account_type,
            is_active=False,
            pix_key=data.pix_key,
            pix_key_holder=data.pix_key_holder,
            pix_qr_code=data.pix_qr_code,
            bank_name=data.bank_name,
            bank_code=data.bank_code,
            account_holder=data.account_holder,
            account_agency=data.account_agency,
            account_number=data.account_number,
            created_at=data.created_at,
            updated_at=data.created_at,
        )
        self._session.add(entity)
        return entity

    async def get(self, account_id: UUID) -> PaymentAccountORM | None:
        stmt = select(PaymentAccountORM).where(PaymentAccountORM.id == account_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_accounts(self, pool: TransactionChannel | None = None) -> list[PaymentAccountORM]:
        stmt = select(PaymentAccountORM).order_by(PaymentAccountORM.created_at.desc())
        if pool is not None:
            stmt = stmt.where(PaymentAccountORM.pool == pool)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_active(
        self, pool: TransactionChannel, account_type: PaymentMethod
    ) -> PaymentAccountORM | None:
        stmt = (
            select(PaymentAccountORM)
            .where(
                PaymentAccountORM.pool == pool,
                PaymentAccountORM.account_type == account_type,
                PaymentAccountORM.is_active.is_(True),
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def lock_group(
        self, pool: TransactionChannel, account_type: PaymentMethod
    ) -> list[PaymentAccountORM]:
        stmt = (
            select(PaymentAccountORM)
            .where(
                PaymentAccountORM.pool == pool,
                PaymentAccountORM.account_type == account_type,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def deactivate_group(
        self, pool: TransactionChannel, account_type: PaymentMethod, now: datetime
    ) -> None:
        stmt = (
            update(PaymentAccountORM)
            .where(
                PaymentAccountORM.pool == pool,
                PaymentAccountORM.account_type == account_type,
                PaymentAccountORM.is_active.is_(True),
            )
            .values(is_active=False, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def set_active(self, account_id: UUID, is_active: bool, now: datetime) -> None:
        stmt = (
            update(PaymentAccountORM)
            .where(PaymentAccountORM.id == account_id)
            .values(is_active=is_active, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def delete(self, account_id: UUID) -> bool:
        stmt = delete(PaymentAccountORM).where(PaymentAccountORM.id == account_id)
        result = await self._session.execute(stmt)
        return bool(getattr(result, "rowcount", 0))
