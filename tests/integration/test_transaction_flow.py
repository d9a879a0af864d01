from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from hubp2p_api.core.config import Settings
from hubp2p_api.core.errors import (
    InvalidTransitionError,
    KycDeniedError,
    NotFoundError,
    TransactionExpiredError,
    ValidationAppError,
)
from hubp2p_api.db.session import LOCAL_PROFILE_ID
from hubp2p_api.repositories.transaction_repository import TransactionRepository
from hubp2p_api.services.admin_session_service import AdminPrincipal
from hubp2p_api.services.exchange_rate_service import ExchangeRateService
from hubp2p_api.services.lifecycle_service import TransitionPlan
from hubp2p_api.use_cases.create_transaction import CreateTransactionUseCase
from hubp2p_api.use_cases.get_transaction import GetTransactionUseCase
from hubp2p_api.use_cases.kyc_review import ReviewKycUseCase, SubmitKycUseCase
from hubp2p_api.use_cases.transition_transaction import (
    CancelTransactionUseCase,
    TransitionTransactionUseCase,
)
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.contracts import (
    CreateApiTransactionRequest,
    CreateUserTransactionRequest,
    CryptoNetwork,
    EventType,
    KycSubmissionRequest,
    OutboxEventORM,
    PaymentMethod,
    ProfileORM,
    TransactionORM,
    TransactionResponse,
    TransactionStatus,
    TransitionRequest,
)
from shared.utils.time import utc_now

_WALLET = "0x" + "ab" * 20


async def _create_user_transaction(
    session_factory: async_sessionmaker[AsyncSession],
    rate_service: ExchangeRateService,
    settings: Settings,
    *,
    user_id: str = LOCAL_PROFILE_ID,
    amount_brl: str = "100.00",
) -> TransactionResponse:
    use_case = CreateTransactionUseCase(session_factory, rate_service, settings)
    return await use_case.execute_for_user(
        user_id,
        CreateUserTransactionRequest(
            amount_brl=Decimal(amount_brl),
            crypto_network=CryptoNetwork.ETHEREUM,
            wallet_address=_WALLET,
            payment_method=PaymentMethod.PIX,
        ),
    )


async def _outbox_events(
    session_factory: async_sessionmaker[AsyncSession], transaction: TransactionResponse
) -> list[OutboxEventORM]:
    async with session_factory() as session:
        result = await session.execute(
            select(OutboxEventORM)
            .where(OutboxEventORM.aggregate_id == transaction.id)
            .order_by(OutboxEventORM.created_at)
        )
        return list(result.scalars().all())


async def _force_expiry(
    session_factory: async_sessionmaker[AsyncSession], transaction: TransactionResponse
) -> None:
    async with session_factory() as session:
        await session.execute(
            update(TransactionORM)
            .where(TransactionORM.id == transaction.id)
            .values(expires_at=utc_now() - timedelta(minutes=1))
        )
        await session.commit()


@pytest.mark.asyncio
async def test_create_locks_rate_and_writes_outbox_events(
    session_factory: async_sessionmaker[AsyncSession],
    rate_service: ExchangeRateService,
    settings: Settings,
) -> None:
    created = await _create_user_transaction(session_factory, rate_service, settings)

    assert created.exchange_rate == Decimal("5.967600")
    assert created.amount_usd == Decimal("16.76")
    assert created.status == TransactionStatus.PENDING_PAYMENT
    assert created.payment.pix_key == "pix@hubp2p.local"
    assert created.transaction_number.startswith("TXN-")
    assert created.version == 1

    events = await _outbox_events(session_factory, created)
    assert sorted(event.event_type for event in events) == sorted(
        [EventType.NOTIFICATION_REQUESTED, EventType.TRANSACTION_STATUS_CHANGED]
    )

    async with session_factory() as session:
        stored = await TransactionRepository(session).get_by_id(created.id)
    assert stored is not None
    assert stored.exchange_rate == Decimal("5.967600")
    assert stored.amount_brl == Decimal("100.00")


@pytest.mark.asyncio
async def test_full_lifecycle_reaches_sent(
    session_factory: async_sessionmaker[AsyncSession],
    rate_service: ExchangeRateService,
    settings: Settings,
    admin: AdminPrincipal,
) -> None:
    created = await _create_user_transaction(session_factory, rate_service, settings)
    transition = TransitionTransactionUseCase(session_factory)

    await transition.execute(
        created.id, TransitionRequest(status=TransactionStatus.PAYMENT_RECEIVED), admin
    )
    await transition.execute(
        created.id, TransitionRequest(status=TransactionStatus.CONVERTING), admin
    )
    sent = await transition.execute(
        created.id,
        TransitionRequest(status=TransactionStatus.SENT, tx_hash=" 0xfeed ", admin_notes="done"),
        admin,
    )

    assert sent.status == TransactionStatus.SENT
    assert sent.version == 4
    assert sent.tx_hash == "0xfeed"
    assert sent.admin_notes == "done"
    assert sent.payment_confirmed_at is not None
    assert sent.crypto_sent_at is not None
    assert sent.owner_full_name == "Demo User"

    events = await _outbox_events(session_factory, created)
    status_updates = [
        event
        for event in events
        if event.event_type == EventType.NOTIFICATION_REQUESTED
        and event.payload["kind"] == "status_update"
    ]
    changes = [
        event.payload["version"]
        for event in events
        if event.event_type == EventType.TRANSACTION_STATUS_CHANGED
    ]
    assert len(status_updates) == 3
    assert sorted(changes) == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_sent_requires_tx_hash(
    session_factory: async_sessionmaker[AsyncSession],
    rate_service: ExchangeRateService,
    settings: Settings,
    admin: AdminPrincipal,
) -> None:
    created = await _create_user_transaction(session_factory, rate_service, settings)
    transition = TransitionTransactionUseCase(session_factory)
    await transition.execute(
        created.id, TransitionRequest(status=TransactionStatus.PAYMENT_RECEIVED), admin
    )

    with pytest.raises(ValidationAppError) as exc_info:
        await transition.execute(
            created.id, TransitionRequest(status=TransactionStatus.SENT), admin
        )

    assert exc_info.value.http_status == 422


@pytest.mark.asyncio
async def test_expired_transaction_only_allows_cancel(
    session_factory: async_sessionmaker[AsyncSession],
    rate_service: ExchangeRateService,
    settings: Settings,
    admin: AdminPrincipal,
) -> None:
    created = await _create_user_transaction(session_factory, rate_service, settings)
    await _force_expiry(session_factory, created)
    transition = TransitionTransactionUseCase(session_factory)

    with pytest.raises(TransactionExpiredError):
        await transition.execute(
            created.id, TransitionRequest(status=TransactionStatus.PAYMENT_RECEIVED), admin
        )

    cancelled = await CancelTransactionUseCase(transition).execute(
        created.id, admin, admin_notes="customer gave up"
    )
    assert cancelled.status == TransactionStatus.CANCELLED
    assert cancelled.version == 2


@pytest.mark.asyncio
async def test_admin_cannot_expire_before_payment_window_elapses(
    session_factory: async_sessionmaker[AsyncSession],
    rate_service: ExchangeRateService,
    settings: Settings,
    admin: AdminPrincipal,
) -> None:
    created = await _create_user_transaction(session_factory, rate_service, settings)
    transition = TransitionTransactionUseCase(session_factory)

    with pytest.raises(InvalidTransitionError):
        await transition.execute(
            created.id, TransitionRequest(status=TransactionStatus.EXPIRED), admin
        )

    async with session_factory() as session:
        stored = await TransactionRepository(session).get_by_id(created.id)
    assert stored is not None
    assert stored.status == TransactionStatus.PENDING_PAYMENT
    assert stored.version == 1
    assert len(await _outbox_events(session_factory, created)) == 2


@pytest.mark.asyncio
async def test_stale_version_does_not_apply(
    session_factory: async_sessionmaker[AsyncSession],
    rate_service: ExchangeRateService,
    settings: Settings,
) -> None:
    created = await _create_user_transaction(session_factory, rate_service, settings)
    stale_plan = TransitionPlan(
        transaction_id=created.id,
        from_status=TransactionStatus.PENDING_PAYMENT,
        to_status=TransactionStatus.PAYMENT_RECEIVED,
        expected_version=7,
        values={"status": TransactionStatus.PAYMENT_RECEIVED, "updated_at": utc_now()},
    )

    async with session_factory() as session:
        applied = await TransactionRepository(session).apply_transition(stale_plan)
        await session.commit()
        stored = await TransactionRepository(session).get_by_id(created.id)

    assert applied is False
    assert stored is not None
    assert stored.status == TransactionStatus.PENDING_PAYMENT
    assert stored.version == 1


@pytest.mark.asyncio
async def test_public_transactions_are_visible_by_number_only_for_api_channel(
    session_factory: async_sessionmaker[AsyncSession],
    rate_service: ExchangeRateService,
    settings: Settings,
) -> None:
    public = await CreateTransactionUseCase(session_factory, rate_service, settings).execute_public(
        CreateApiTransactionRequest(
            amount_brl=Decimal("250.00"),
            crypto_network=CryptoNetwork.POLYGON,
            wallet_address=_WALLET,
        )
    )
    private = await _create_user_transaction(session_factory, rate_service, settings)
    reader = GetTransactionUseCase(session_factory)

    found = await reader.public(public.transaction_number.lower())
    assert found.id == public.id
    assert public.transaction_number.startswith("API-")
    assert public.payment.pix_key == "api-pix@hubp2p.local"

    with pytest.raises(NotFoundError):
        await reader.public(private.transaction_number)
    with pytest.raises(NotFoundError):
        await reader.for_user(private.id, "someone-else")
    assert (await reader.for_user(private.id, LOCAL_PROFILE_ID)).id == private.id


@pytest.mark.asyncio
async def test_user_needs_approved_kyc_before_creating(
    session_factory: async_sessionmaker[AsyncSession],
    rate_service: ExchangeRateService,
    settings: Settings,
    admin: AdminPrincipal,
) -> None:
    async with session_factory() as session:
        session.add(ProfileORM(id="user-new", full_name="Nova", created_at=utc_now()))
        await session.commit()

    with pytest.raises(KycDeniedError):
        await _create_user_transaction(
            session_factory, rate_service, settings, user_id="user-new"
        )

    submitted = await SubmitKycUseCase(session_factory).execute(
        "user-new",
        KycSubmissionRequest(full_name="Nova", document_type="cpf", document_number="123"),
    )
    await ReviewKycUseCase(session_factory).approve(submitted.id, admin)

    created = await _create_user_transaction(
        session_factory, rate_service, settings, user_id="user-new"
    )
    assert created.user_id == "user-new"
