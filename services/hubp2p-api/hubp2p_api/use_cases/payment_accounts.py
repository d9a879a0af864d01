from __future__ import annotations

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hubp2p_api.core.errors import ConcurrencyConflictError, NotFoundError, ValidationAppError
from hubp2p_api.db.guards import store_write
from hubp2p_api.repositories.payment_account_repository import (
    PaymentAccountCreateData,
    PaymentAccountRepository,
)
from shared.contracts import (
    ActivePaymentAccountsResponse,
    ActivePixInstructions,
    ActiveTedInstructions,
    CreatePaymentAccountRequest,
    PaymentAccountORM,
    PaymentAccountResponse,
    PaymentMethod,
    TransactionChannel,
)
from shared.logging import PAYMENT_ACCOUNT_ID, get_logger
from shared.utils.time import utc_now

logger = get_logger(__name__)
_NOT_FOUND_MESSAGE = "Payment account not found"
_TED_REQUIRED_FIELDS = ("bank_name", "account_holder", "account_agency", "account_number")


def validate_account_request(request: CreatePaymentAccountRequest) -> None:
    if request.pool == TransactionChannel.API and request.account_type != PaymentMethod.PIX:
        raise ValidationAppError("The public pool only accepts pix accounts")
    if request.account_type == PaymentMethod.PIX and not request.pix_key:
        raise ValidationAppError("pix_key is required for pix accounts")
    if request.account_type == PaymentMethod.TED:
        missing = [name for name in _TED_REQUIRED_FIELDS if not getattr(request, name)]
        if missing:
            raise ValidationAppError(f"Missing ted account fields: {', '.join(missing)}")


class CreatePaymentAccountUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(self, request: CreatePaymentAccountRequest) -> PaymentAccountResponse:
        validate_account_request(request)
        is_pix = request.account_type == PaymentMethod.PIX
        async with self._session_factory() as session:
            async with store_write(session, "create_payment_account"):
                account = PaymentAccountRepository(session).create(
                    PaymentAccountCreateData(
                        pool=request.pool,
                        account_type=request.account_type,
                        pix_key=request.pix_key if is_pix else None,
                        pix_key_holder=request.pix_key_holder if is_pix else None,
                        pix_qr_code=request.pix_qr_code if is_pix else None,
                        bank_name=None if is_pix else request.bank_name,
                        bank_code=None if is_pix else request.bank_code,
                        account_holder=None if is_pix else request.account_holder,
                        account_agency=None if is_pix else request.account_agency,
                        account_number=None if is_pix else request.account_number,
                        created_at=utc_now(),
                    )
                )
                await session.commit()
        logger.info(
            "payment_account_created",
            extra={
                "extra_fields": {
                    PAYMENT_ACCOUNT_ID: str(account.id),
                    "pool": request.pool.value,
                    "account_type": request.account_type.value,
                }
            },
        )
        return PaymentAccountResponse.model_validate(account)


class ListPaymentAccountsUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(self, pool: TransactionChannel | None = None) -> list[PaymentAccountResponse]:
        async with self._session_factory() as session:
            accounts = await PaymentAccountRepository(session).list_accounts(pool)
        return [PaymentAccountResponse.model_validate(account) for account in accounts]


class TogglePaymentAccountUseCase:
    """Flips one account while keeping at most one active account per pool and type."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(self, account_id: UUID) -> PaymentAccountResponse:
        async with self._session_factory() as session:
            accounts = PaymentAccountRepository(session)
            target = await accounts.get(account_id)
            if target is None:
                raise NotFoundError(_NOT_FOUND_MESSAGE)
            pool, account_type = target.pool, target.account_type

            async with store_write(session, "toggle_payment_account"):
                try:
                    group = await accounts.lock_group(pool, account_type)
                    locked = _find(group, account_id)
                    if locked is None:
                        raise NotFoundError(_NOT_FOUND_MESSAGE)
                    activate = not locked.is_active
                    now = utc_now()
                    if activate:
                        await accounts.deactivate_group(pool, account_type, now)
                    await accounts.set_active(account_id, activate, now)
                    await session.commit()
                except IntegrityError as exc:
                    await session.rollback()
                    raise ConcurrencyConflictError(
                        "Another account of this type was activated concurrently"
                    ) from exc
            await session.refresh(target)

        logger.info(
            "payment_account_toggled",
            extra={
                "extra_fields": {
                    PAYMENT_ACCOUNT_ID: str(account_id),
                    "is_active": activate,
                    "pool": pool.value,
                    "account_type": account_type.value,
                }
            },
        )
        return PaymentAccountResponse.model_validate(target)


class DeletePaymentAccountUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(self, account_id: UUID) -> None:
        async with self._session_factory() as session:
            async with store_write(session, "delete_payment_account"):
                deleted = await PaymentAccountRepository(session).delete(account_id)
                if not deleted:
                    raise NotFoundError(_NOT_FOUND_MESSAGE)
                await session.commit()
        logger.info(
            "payment_account_deleted", extra={"extra_fields": {PAYMENT_ACCOUNT_ID: str(account_id)}}
        )


class GetActivePaymentAccountsUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(
        self, pool: TransactionChannel = TransactionChannel.USER
    ) -> ActivePaymentAccountsResponse:
        async with self._session_factory() as session:
            accounts = PaymentAccountRepository(session)
            pix = await accounts.get_active(pool, PaymentMethod.PIX)
            ted = await accounts.get_active(pool, PaymentMethod.TED)
        return ActivePaymentAccountsResponse(
            pix=_pix_instructions(pix),
            ted=_ted_instructions(ted),
        )


def _find(group: list[PaymentAccountORM], account_id: UUID) -> PaymentAccountORM | None:
    for account in group:
        if account.id == account_id:
            return account
    return None


def _pix_instructions(account: PaymentAccountORM | None) -> ActivePixInstructions | None:
    if account is None or not account.pix_key:
        return None
    return ActivePixInstructions(
        pix_key=account.pix_key,
        pix_key_holder=account.pix_key_holder,
        pix_qr_code=account.pix_qr_code,
    )


def _ted_instructions(account: PaymentAccountORM | None) -> ActiveTedInstructions | None:
    if account is None:
        return None
    return ActiveTedInstructions(
        bank_name=account.bank_name,
        bank_code=account.bank_code,
        account_holder=account.account_holder,
        account_agency=account.account_agency,
        account_number=account.account_number,
    )
