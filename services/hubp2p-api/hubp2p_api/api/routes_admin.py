from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from hubp2p_api.api.dependencies import (
    get_cancel_use_case,
    get_create_payment_account_use_case,
    get_dashboard_use_case,
    get_delete_payment_account_use_case,
    get_get_transaction_use_case,
    get_list_kyc_use_case,
    get_list_notifications_use_case,
    get_list_payment_accounts_use_case,
    get_list_transactions_use_case,
    get_request_notification_use_case,
    get_review_kyc_use_case,
    get_toggle_payment_account_use_case,
    get_transition_use_case,
    get_update_notes_use_case,
    require_admin,
)
from hubp2p_api.services.admin_session_service import AdminPrincipal
from hubp2p_api.use_cases.dashboard_stats import DashboardStatsUseCase
from hubp2p_api.use_cases.get_transaction import GetTransactionUseCase
from hubp2p_api.use_cases.kyc_review import ListKycUseCase, ReviewKycUseCase
from hubp2p_api.use_cases.list_transactions import ListTransactionsUseCase
from hubp2p_api.use_cases.notifications import ListNotificationsUseCase, RequestNotificationUseCase
from hubp2p_api.use_cases.payment_accounts import (
    CreatePaymentAccountUseCase,
    DeletePaymentAccountUseCase,
    ListPaymentAccountsUseCase,
    TogglePaymentAccountUseCase,
)
from hubp2p_api.use_cases.transition_transaction import (
    CancelTransactionUseCase,
    TransitionTransactionUseCase,
    UpdateAdminNotesUseCase,
)
from shared.contracts import (
    AdminNotesRequest,
    AdminTransactionResponse,
    CreatePaymentAccountRequest,
    DashboardStatsResponse,
    KycRejectRequest,
    KycStatus,
    KycVerificationResponse,
    NotificationEnqueuedResponse,
    NotificationLogResponse,
    NotificationStatus,
    PaymentAccountResponse,
    TransactionChannel,
    TransactionPage,
    TransactionStatus,
    TransitionRequest,
)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

CurrentAdmin = Annotated[AdminPrincipal, Depends(require_admin)]


@router.get("/transactions")
async def list_transactions(
    use_case: Annotated[ListTransactionsUseCase, Depends(get_list_transactions_use_case)],
    status_filter: Annotated[TransactionStatus | None, Query(alias="status")] = None,
    channel: Annotated[TransactionChannel | None, Query()] = None,
    search: Annotated[str | None, Query(max_length=128)] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> TransactionPage:
    return await use_case.for_admin(
        status=status_filter, channel=channel, search=search, limit=limit, offset=offset
    )


@router.get("/transactions/{transaction_id}")
async def get_transaction(
    transaction_id: UUID,
    use_case: Annotated[GetTransactionUseCase, Depends(get_get_transaction_use_case)],
) -> AdminTransactionResponse:
    return await use_case.for_admin(transaction_id)


@router.post("/transactions/{transaction_id}/status")
async def transition_transaction(
    transaction_id: UUID,
    payload: TransitionRequest,
    admin: CurrentAdmin,
    use_case: Annotated[TransitionTransactionUseCase, Depends(get_transition_use_case)],
) -> AdminTransactionResponse:
    return await use_case.execute(transaction_id, payload, admin)


@router.post("/transactions/{transaction_id}/cancel")
async def cancel_transaction(
    transaction_id: UUID,
    admin: CurrentAdmin,
    use_case: Annotated[CancelTransactionUseCase, Depends(get_cancel_use_case)],
) -> AdminTransactionResponse:
    return await use_case.execute(transaction_id, admin)


@router.patch("/transactions/{transaction_id}/notes")
async def update_admin_notes(
    transaction_id: UUID,
    payload: AdminNotesRequest,
    use_case: Annotated[UpdateAdminNotesUseCase, Depends(get_update_notes_use_case)],
) -> AdminTransactionResponse:
    return await use_case.execute(transaction_id, payload)


@router.post("/transactions/{transaction_id}/notify", status_code=status.HTTP_202_ACCEPTED)
async def request_notification(
    transaction_id: UUID,
    use_case: Annotated[RequestNotificationUseCase, Depends(get_request_notification_use_case)],
) -> NotificationEnqueuedResponse:
    return await use_case.execute(transaction_id)


@router.get("/notifications")
async def list_notifications(
    use_case: Annotated[ListNotificationsUseCase, Depends(get_list_notifications_use_case)],
    transaction_id: Annotated[UUID | None, Query()] = None,
    status_filter: Annotated[NotificationStatus | None, Query(alias="status")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[NotificationLogResponse]:
    return await use_case.execute(transaction_id=transaction_id, status=status_filter, limit=limit)


@router.get("/dashboard")
async def dashboard(
    use_case: Annotated[DashboardStatsUseCase, Depends(get_dashboard_use_case)],
) -> DashboardStatsResponse:
    return await use_case.execute()


@router.get("/payment-accounts")
async def list_payment_accounts(
    use_case: Annotated[ListPaymentAccountsUseCase, Depends(get_list_payment_accounts_use_case)],
    pool: Annotated[TransactionChannel | None, Query()] = None,
) -> list[PaymentAccountResponse]:
    return await use_case.execute(pool)


@router.post("/payment-accounts", status_code=status.HTTP_201_CREATED)
async def create_payment_account(
    payload: CreatePaymentAccountRequest,
    use_case: Annotated[CreatePaymentAccountUseCase, Depends(get_create_payment_account_use_case)],
) -> PaymentAccountResponse:
    return await use_case.execute(payload)


@router.post("/payment-accounts/{account_id}/toggle")
async def toggle_payment_account(
    account_id: UUID,
    use_case: Annotated[TogglePaymentAccountUseCase, Depends(get_toggle_payment_account_use_case)],
) -> PaymentAccountResponse:
    return await use_case.execute(account_id)


@router.delete("/payment-accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment_account(
    account_id: UUID,
    use_case: Annotated[DeletePaymentAccountUseCase, Depends(get_delete_payment_account_use_case)],
) -> Response:
    await use_case.execute(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/kyc")
async def list_kyc(
    use_case: Annotated[ListKycUseCase, Depends(get_list_kyc_use_case)],
    status_filter: Annotated[KycStatus | None, Query(alias="status")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 100,
) -> list[KycVerificationResponse]:
    return await use_case.execute(status_filter, limit)


@router.post("/kyc/{verification_id}/start-review")
async def start_kyc_review(
    verification_id: UUID,
    admin: CurrentAdmin,
    use_case: Annotated[ReviewKycUseCase, Depends(get_review_kyc_use_case)],
) -> KycVerificationResponse:
    return await use_case.start_review(verification_id, admin)


@router.post("/kyc/{verification_id}/approve")
async def approve_kyc(
    verification_id: UUID,
    admin: CurrentAdmin,
    use_case: Annotated[ReviewKycUseCase, Depends(get_review_kyc_use_case)],
) -> KycVerificationResponse:
    return await use_case.approve(verification_id, admin)


@router.post("/kyc/{verification_id}/reject")
async def reject_kyc(
    verification_id: UUID,
    payload: KycRejectRequest,
    admin: CurrentAdmin,
    use_case: Annotated[ReviewKycUseCase, Depends(get_review_kyc_use_case)],
) -> KycVerificationResponse:
    return await use_case.reject(verification_id, payload, admin)
