from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hubp2p_api.services.lifecycle_service import TransitionPlan
from shared.contracts import (
    CryptoNetwork,
    PaymentMethod,
    ProfileORM,
    TransactionChannel,
    TransactionORM,
    TransactionStatus,
    transaction_number_seq,
)
from shared.utils.ids import format_transaction_number


@dataclass(frozen=True)
class TransactionCreateData:
    transaction_id: UUID
    transaction_number: str
    channel: TransactionChannel
    user_id: str | None
    amount_brl: Decimal
    amount_usd: Decimal
    exchange_rate: Decimal
    crypto_amount: Decimal | None
    crypto_network: CryptoNetwork
    wallet_address: str
    payment_method: PaymentMethod
    payment_account_id: UUID
    pix_key: str | None
    pix_key_holder: str | None
    pix_qr_code: str | None
    bank_name: str | None
    bank_code: str | None
    bank_account_holder: str | None
    bank_account_agency: str | None
    bank_account_number: str | None
    created_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TransactionFilters:
    status: TransactionStatus | None = None
    channel: TransactionChannel | None = None
    search: str | None = None
    user_id: str | None = None


class TransactionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, transaction_id: UUID) -> TransactionORM | None:
        stmt = select(TransactionORM).where(TransactionORM.id == transaction_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_number(self, transaction_number: str) -> TransactionORM | None:
        stmt = select(TransactionORM).where(
            TransactionORM.transaction_number == transaction_number
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

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

    async def next_transaction_number(self, channel: TransactionChannel, now: datetime) -> str:
        result = await self._session.execute(select(transaction_number_seq.next_value()))
        return format_transaction_number(channel, now, int(result.scalar_one()))

    def create(self, data: TransactionCreateData) -> TransactionORM:
        entity = TransactionORM(
            id=data.transaction_id,
            transaction_number=data.transaction_number,
            channel=data.channel,
            user_id=data.user_id,
            amount_brl=data.amount_brl,
            amount_usd=data.amount_usd,
            exchange_rate=data.exchange_rate,
            crypto_amount=data.crypto_amount,
            crypto_network=data.crypto_network,
            wallet_address=data.wallet_address,
            payment_method=data.payment_method,
            payment_account_id=data.payment_account_id,
            pix_key=data.pix_key,
            pix_key_holder=data.pix_key_holder,
            pix_qr_code=data.pix_qr_code,
            bank_name=data.bank_name,
            bank_code=data.bank_code,
            bank_account_holder=data.bank_account_holder,
            bank_account_agency=data.bank_account_agency,
            bank_account_number=data.bank_account_number,
            status=TransactionStatus.PENDING_PAYMENT,
            created_at=data.created_at,
            updated_at=data.created_at,
            expires_at=data.expires_at,
            version=1,
        )
        self._session.add(entity)
        return entity

    async def apply_transition(self, plan: TransitionPlan) -> bool:
        stmt = (
            update(TransactionORM)
            .where(
                TransactionORM.id == plan.transaction_id,
                TransactionORM.status == plan.from_status,
                TransactionORM.version == plan.expected_version,
            )
            .values(**plan.values, version=plan.next_version)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return getattr(result, "rowcount", 0) == 1

    async def update_admin_notes(
        self, transaction_id: UUID, admin_notes: str, now: datetime
    ) -> bool:
        stmt = (
            update(TransactionORM)
            .where(TransactionORM.id == transaction_id)
            .values(admin_notes=admin_notes, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return bool(getattr(result, "rowcount", 0))

    async def list_with_owners(
        self, filters: TransactionFilters, *, limit: int, offset: int
    ) -> tuple[list[tuple[TransactionORM, ProfileORM | None]], int]:
        conditions = self._conditions(filters)
        stmt = (
            select(TransactionORM, ProfileORM)
            .outerjoin(ProfileORM, ProfileORM.id == TransactionORM.user_id)
            .where(*conditions)
            .order_by(TransactionORM.created_at.desc(), TransactionORM.transaction_number.desc())
            .limit(limit)
            .offset(offset)
        )
        rows = (await self._session.execute(stmt)).all()
        count_stmt = select(func.count()).select_from(TransactionORM).where(*conditions)
        total = int((await self._session.execute(count_stmt)).scalar_one())
        return [(row[0], row[1]) for row in rows], total

    def _conditions(self, filters: TransactionFilters) -> list:
        conditions = []
        if filters.status is not None:
            conditions.append(TransactionORM.status == filters.status)
        if filters.channel is not None:
            conditions.append(TransactionORM.channel == filters.channel)
        if filters.user_id is not None:
            conditions.append(TransactionORM.user_id == filters.user_id)
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(
                or_(
                    TransactionORM.transaction_number.ilike(pattern),
                    TransactionORM.wallet_address.ilike(pattern),
                )
            )
        return conditions
