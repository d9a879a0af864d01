from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hubp2p_api.core.config import Settings
from hubp2p_api.core.errors import (
    KycDeniedError,
    NoActivePaymentAccountError,
    NotFoundError,
    ValidationAppError,
)
from hubp2p_api.core.metrics import transactions_created_total
from hubp2p_api.db.guards import store_write
from hubp2p_api.repositories.kyc_repository import KycRepository
from hubp2p_api.repositories.outbox_repository import OutboxRepository
from hubp2p_api.repositories.payment_account_repository import PaymentAccountRepository
from hubp2p_api.repositories.profile_repository import ProfileRepository
from hubp2p_api.repositories.transaction_repository import (
    TransactionCreateData,
    TransactionRepository,
)
from hubp2p_api.services.exchange_rate_service import ExchangeRateService, convert_brl_to_usd
from hubp2p_api.services.lifecycle_service import LifecycleService
from hubp2p_api.use_cases.transaction_views import to_transaction_response
from shared.constants import (
    INITIAL_STATUS,
    network_allowed_for_channel,
    wallet_address_matches_network,
)
from shared.contracts import (
    CreateApiTransactionRequest,
    CreateUserTransactionRequest,
    KycStatus,
    NotificationKind,
    PaymentAccountORM,
    PaymentMethod,
    TransactionChannel,
    TransactionResponse,
    TransactionStatusChangedPayload,
)
from shared.logging import (
    CHANNEL,
    TRANSACTION_ID,
    TRANSACTION_NUMBER,
    USER_ID,
    get_logger,
    update_correlation_context,
)
from shared.observability import attributes as otel_attrs
from shared.utils.ids import new_uuid
from shared.utils.time import utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class CreationRequest:
    channel: TransactionChannel
    user_id: str | None
    payload: CreateApiTransactionRequest
    payment_method: PaymentMethod


class CreateTransactionUseCase:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        rate_service: ExchangeRateService,
        settings: Settings,
    ) -> None:
        self._session_factory = session_factory
        self._rate_service = rate_service
        self._settings = settings
        self._lifecycle = LifecycleService()
        self._tracer = trace.get_tracer(__name__)

    async def execute_for_user(
        self, user_id: str, payload: CreateUserTransactionRequest
    ) -> TransactionResponse:
        update_correlation_context({USER_ID: user_id, CHANNEL: TransactionChannel.USER.value})
        return await self._create(
            CreationRequest(
                channel=TransactionChannel.USER,
                user_id=user_id,
                payload=payload,
                payment_method=payload.payment_method,
            )
        )

    async def execute_public(self, payload: CreateApiTransactionRequest) -> TransactionResponse:
        update_correlation_context({CHANNEL: TransactionChannel.API.value})
        return await self._create(
            CreationRequest(
                channel=TransactionChannel.API,
                user_id=None,
                payload=payload,
                payment_method=PaymentMethod.PIX,
            )
        )

    async def _create(self, request: CreationRequest) -> TransactionResponse:
        with self._tracer.start_as_current_span("validate"):
            self._validate(request)

        async with self._session_factory() as session:
            if request.user_id is not None:
                await self._ensure_user_eligible(session, request.user_id)

            account = await PaymentAccountRepository(session).get_active(
                request.channel, request.payment_method
            )
            if account is None:
                raise NoActivePaymentAccountError(
                    f"No active {request.payment_method.value} account is available"
                )

        # no pooled connection is held while the rate provider retries
        with self._tracer.start_as_current_span("rate_snapshot") as span:
            snapshot = await self._rate_service.authoritative_snapshot()
            span.set_attribute(otel_attrs.RATE_SOURCE, snapshot.source.value)

        async with self._session_factory() as session:
            async with store_write(session, "create_transaction"):
                transactions = TransactionRepository(session)
                now = utc_now()
                transaction_number = await transactions.next_transaction_number(
                    request.channel, now
                )
                data = self._build_create_data(
                    request,
                    account,
                    transaction_number=transaction_number,
                    exchange_rate=snapshot.final_rate,
                    amount_usd=convert_brl_to_usd(request.payload.amount_brl, snapshot),
                    now=now,
                )
                transaction = transactions.create(data)
                trace.get_current_span().set_attributes(
                    {
                        otel_attrs.TRANSACTION_ID: str(transaction.id),
                        otel_attrs.TRANSACTION_NUMBER: transaction_number,
                        otel_attrs.CHANNEL: request.channel.value,
                    }
                )

                outbox = OutboxRepository(session)
                outbox.add_notification_request(transaction.id, NotificationKind.NEW_TRANSACTION)
                outbox.add_status_change(
                    TransactionStatusChangedPayload(
                        transaction_id=transaction.id,
                        transaction_number=transaction_number,
                        previous_status=None,
                        status=INITIAL_STATUS,
                        updated_at=now,
                        version=1,
                    )
                )
                await session.commit()

        transactions_created_total.add(1, {"channel": request.channel.value})
        update_correlation_context(
            {TRANSACTION_ID: str(transaction.id), TRANSACTION_NUMBER: transaction_number}
        )
        logger.info(
            "transaction_created",
            extra={
                "extra_fields": {
                    "amount_brl": str(request.payload.amount_brl),
                    "exchange_rate": str(snapshot.final_rate),
                    "rate_source": snapshot.source.value,
                    "payment_method": request.payment_method.value,
                }
            },
        )
        return to_transaction_response(transaction, now)

    def _validate(self, request: CreationRequest) -> None:
        payload = request.payload
        if payload.amount_brl < self._settings.min_amount_brl:
            raise ValidationAppError(
                f"amount_brl must be at least {self._settings.min_amount_brl}"
            )
        if not network_allowed_for_channel(payload.crypto_network, request.channel):
            raise ValidationAppError(
                f"Network {payload.crypto_network.value} is not available for this channel"
            )
        if request.channel == TransactionChannel.API and request.payment_method != PaymentMethod.PIX:
            raise ValidationAppError("Public transactions only accept pix")
        if self._settings.validate_wallet_address and not wallet_address_matches_network(
            payload.crypto_network, payload.wallet_address
        ):
            raise ValidationAppError(
                f"wallet_address is not a valid {payload.crypto_network.value} address"
            )

    async def _ensure_user_eligible(self, session: AsyncSession, user_id: str) -> None:
        profile = await ProfileRepository(session).get_by_id(user_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        if not self._settings.require_kyc_for_user_transactions:
            return
        verification = await KycRepository(session).latest_for_user(user_id)
        if verification is None or verification.status != KycStatus.APPROVED:
            raise KycDeniedError()

    def _build_create_data(
        self,
        request: CreationRequest,
        account: PaymentAccountORM,
        *,
        transaction_number: str,
        exchange_rate: Decimal,
        amount_usd: Decimal,
        now: datetime,
    ) -> TransactionCreateData:
        is_pix = request.payment_method == PaymentMethod.PIX
        return TransactionCreateData(
            transaction_id=new_uuid(),
            transaction_number=transaction_number,
            channel=request.channel,
            user_id=request.user_id,
            amount_brl=request.payload.amount_brl,
            amount_usd=amount_usd,
            exchange_rate=exchange_rate,
            crypto_amount=None,
            crypto_network=request.payload.crypto_network,
            wallet_address=request.payload.wallet_address,
            payment_method=request.payment_method,
            payment_account_id=account.id,
            pix_key=account.pix_key if is_pix else None,
            pix_key_holder=account.pix_key_holder if is_pix else None,
            pix_qr_code=account.pix_qr_code if is_pix else None,
            bank_name=None if is_pix else account.bank_name,
            bank_code=None if is_pix else account.bank_code,
            bank_account_holder=None if is_pix else account.account_holder,
            bank_account_agency=None if is_pix else account.account_agency,
            bank_account_number=None if is_pix else account.account_number,
            created_at=now,
            expires_at=now + timedelta(minutes=self._settings.payment_window_minutes),
        )
