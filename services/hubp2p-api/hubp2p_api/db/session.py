from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from hubp2p_api.core.config import Settings
from hubp2p_api.services.admin_session_service import hash_session_token
from shared.contracts import (
    AdminSessionORM,
    AdminUserORM,
    Base,
    KycStatus,
    KycVerificationORM,
    PaymentAccountORM,
    PaymentMethod,
    ProfileORM,
    TransactionChannel,
)
from shared.utils.time import utc_now

LOCAL_PROFILE_ID = "user-demo-001"


def build_engine(postgres_dsn: str) -> AsyncEngine:
    return create_async_engine(postgres_dsn, echo=False, pool_pre_ping=True)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_session(factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with factory() as session:
        yield session


async def init_db(engine: AsyncEngine, settings: Settings) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = build_session_factory(engine)
    async with session_factory() as session:
        await _seed_profiles(session)
        await _seed_payment_accounts(session)
        await _seed_admin(session, settings)
        await session.commit()


async def _seed_profiles(session: AsyncSession) -> None:
    existing = await session.execute(select(ProfileORM.id).limit(1))
    if existing.scalar_one_or_none():
        return
    now = utc_now()
    session.add(
        ProfileORM(
            id=LOCAL_PROFILE_ID,
            full_name="Demo User",
            email="demo@hubp2p.local",
            created_at=now,
        )
    )
    await session.flush()
    session.add(
        KycVerificationORM(
            user_id=LOCAL_PROFILE_ID,
            status=KycStatus.APPROVED,
            full_name="Demo User",
            document_type="cpf",
            document_number="00000000000",
            verified_at=now,
            created_at=now,
            updated_at=now,
        )
    )


async def _seed_payment_accounts(session: AsyncSession) -> None:
    existing = await session.execute(select(PaymentAccountORM.id).limit(1))
    if existing.scalar_one_or_none():
        return
    now = utc_now()
    session.add_all(
        [
            PaymentAccountORM(
                pool=TransactionChannel.USER,
                account_type=PaymentMethod.PIX,
                is_active=True,
                pix_key="pix@hubp2p.local",
                pix_key_holder="HubP2P Pagamentos",
                created_at=now,
                updated_at=now,
            ),
            PaymentAccountORM(
                pool=TransactionChannel.USER,
                account_type=PaymentMethod.TED,
                is_active=True,
                bank_name="Banco Local",
                bank_code="001",
                account_holder="HubP2P Pagamentos",
                account_agency="0001",
                account_number="123456-7",
                created_at=now,
                updated_at=now,
            ),
            PaymentAccountORM(
                pool=TransactionChannel.API,
                account_type=PaymentMethod.PIX,
                is_active=True,
                pix_key="api-pix@hubp2p.local",
                pix_key_holder="HubP2P Pagamentos",
                created_at=now,
                updated_at=now,
            ),
        ]
    )


async def _seed_admin(session: AsyncSession, settings: Settings) -> None:
    if not settings.local_admin_token:
        return
    token_hash = hash_session_token(settings.local_admin_token)
    existing = await session.get(AdminSessionORM, token_hash)
    if existing:
        return
    admin = (
        await session.execute(
            select(AdminUserORM).where(AdminUserORM.email == settings.local_admin_email)
        )
    ).scalar_one_or_none()
    now = utc_now()
    if admin is None:
        admin = AdminUserORM(email=settings.local_admin_email, is_active=True, created_at=now)
        session.add(admin)
        await session.flush()
    session.add(
        AdminSessionORM(
            token_hash=token_hash,
            admin_id=admin.id,
            expires_at=now + timedelta(hours=settings.local_admin_session_hours),
            created_at=now,
        )
    )
