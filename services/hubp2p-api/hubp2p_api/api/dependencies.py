from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hubp2p_api.core.config import Settings
from hubp2p_api.core.errors import UnauthenticatedError
from hubp2p_api.services.admin_session_service import AdminPrincipal, AdminSessionService
from hubp2p_api.services.change_feed import RedisChangeSubscriber
from hubp2p_api.services.exchange_rate_service import ExchangeRateService
from hubp2p_api.use_cases.create_transaction import CreateTransactionUseCase
from hubp2p_api.use_cases.dashboard_stats import DashboardStatsUseCase
from hubp2p_api.use_cases.get_quote import GetQuoteUseCase
from hubp2p_api.use_cases.get_transaction import GetTransactionUseCase
from hubp2p_api.use_cases.kyc_review import (
    GetKycStatusUseCase,
    ListKycUseCase,
    ReviewKycUseCase,
    SubmitKycUseCase,
)
from hubp2p_api.use_cases.list_transactions import ListTransactionsUseCase
from hubp2p_api.use_cases.notifications import ListNotificationsUseCase, RequestNotificationUseCase
from hubp2p_api.use_cases.payment_accounts import (
    CreatePaymentAccountUseCase,
    DeletePaymentAccountUseCase,
    GetActivePaymentAccountsUseCase,
    ListPaymentAccountsUseCase,
    TogglePaymentAccountUseCase,
)
from hubp2p_api.use_cases.transition_transaction import (
    CancelTransactionUseCase,
    TransitionTransactionUseCase,
    UpdateAdminNotesUseCase,
)
from hubp2p_api.use_cases.watch_transaction import WatchTransactionUseCase
from shared.logging import ADMIN_ID, USER_ID, update_correlation_context


def get_settings_from_state(request: Request) -> Settings:
    return request.app.state.settings


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.session_factory


def get_redis_client(request: Request) -> Redis | None:
    return getattr(request.app.state, "redis_client", None)


def get_rate_service(request: Request) -> ExchangeRateService:
    return request.app.state.rate_service


def get_admin_session_service(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> AdminSessionService:
    return AdminSessionService(session_factory)


async def require_admin(
    request: Request,
    service: Annotated[AdminSessionService, Depends(get_admin_session_service)],
) -> AdminPrincipal:
    settings = get_settings_from_state(request)
    token = request.cookies.get(settings.admin_session_cookie) or request.headers.get(
        settings.admin_session_header
    )
    principal = await service.authenticate(token)
    update_correlation_context({ADMIN_ID: str(principal.admin_id)})
    return principal


def require_user_id(x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None) -> str:
    if x_user_id is None or not x_user_id.strip():
        raise UnauthenticatedError()
    user_id = x_user_id.strip()
    update_correlation_context({USER_ID: user_id})
    return user_id


def optional_user_id(
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> str | None:
    if x_user_id is None or not x_user_id.strip():
        return None
    return x_user_id.strip()


def get_quote_use_case(
    request: Request,
    rate_service: Annotated[ExchangeRateService, Depends(get_rate_service)],
) -> GetQuoteUseCase:
    settings = get_settings_from_state(request)
    return GetQuoteUseCase(rate_service, settings.quote_refresh_seconds)


def get_create_transaction_use_case(
    request: Request,
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
    rate_service: Annotated[ExchangeRateService, Depends(get_rate_service)],
) -> CreateTransactionUseCase:
    return CreateTransactionUseCase(session_factory, rate_service, get_settings_from_state(request))


def get_get_transaction_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> GetTransactionUseCase:
    return GetTransactionUseCase(session_factory)


def get_list_transactions_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> ListTransactionsUseCase:
    return ListTransactionsUseCase(session_factory)


def get_transition_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> TransitionTransactionUseCase:
    return TransitionTransactionUseCase(session_factory)


def get_cancel_use_case(
    transition: Annotated[TransitionTransactionUseCase, Depends(get_transition_use_case)],
) -> CancelTransactionUseCase:
    return CancelTransactionUseCase(transition)


def get_update_notes_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> UpdateAdminNotesUseCase:
    return UpdateAdminNotesUseCase(session_factory)


def get_watch_use_case(
    request: Request,
    get_transaction: Annotated[GetTransactionUseCase, Depends(get_get_transaction_use_case)],
    redis_client: Annotated[Redis | None, Depends(get_redis_client)],
) -> WatchTransactionUseCase:
    subscriber = RedisChangeSubscriber(redis_client) if redis_client is not None else None
    settings = get_settings_from_state(request)
    return WatchTransactionUseCase(get_transaction, subscriber, settings.watch_heartbeat_seconds)


def get_create_payment_account_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> CreatePaymentAccountUseCase:
    return CreatePaymentAccountUseCase(session_factory)


def get_list_payment_accounts_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> ListPaymentAccountsUseCase:
    return ListPaymentAccountsUseCase(session_factory)


def get_toggle_payment_account_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> TogglePaymentAccountUseCase:
    return TogglePaymentAccountUseCase(session_factory)


def get_delete_payment_account_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> DeletePaymentAccountUseCase:
    return DeletePaymentAccountUseCase(session_factory)


def get_active_payment_accounts_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> GetActivePaymentAccountsUseCase:
    return GetActivePaymentAccountsUseCase(session_factory)


def get_submit_kyc_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> SubmitKycUseCase:
    return SubmitKycUseCase(session_factory)


def get_kyc_status_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> GetKycStatusUseCase:
    return GetKycStatusUseCase(session_factory)


def get_list_kyc_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> ListKycUseCase:
    return ListKycUseCase(session_factory)


def get_review_kyc_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> ReviewKycUseCase:
    return ReviewKycUseCase(session_factory)


def get_request_notification_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> RequestNotificationUseCase:
    return RequestNotificationUseCase(session_factory)


def get_list_notifications_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> ListNotificationsUseCase:
    return ListNotificationsUseCase(session_factory)


def get_dashboard_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> DashboardStatsUseCase:
    return DashboardStatsUseCase(session_factory)
