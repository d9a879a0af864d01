from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from hubp2p_api.api.dependencies import (
    get_active_payment_accounts_use_case,
    get_create_transaction_use_case,
    get_get_transaction_use_case,
)
from hubp2p_api.use_cases.create_transaction import CreateTransactionUseCase
from hubp2p_api.use_cases.get_transaction import GetTransactionUseCase
from hubp2p_api.use_cases.payment_accounts import GetActivePaymentAccountsUseCase
from shared.contracts import (
    ActivePaymentAccountsResponse,
    CreateApiTransactionRequest,
    TransactionResponse,
    TransactionStatusSnapshot,
)

router = APIRouter(tags=["public"])


@router.post("/public/transactions", status_code=status.HTTP_201_CREATED)
async def create_public_transaction(
    payload: CreateApiTransactionRequest,
    use_case: Annotated[CreateTransactionUseCase, Depends(get_create_transaction_use_case)],
) -> TransactionResponse:
    return await use_case.execute_public(payload)


@router.get("/public/transactions/{reference}")
async def get_public_transaction(
    reference: str,
    use_case: Annotated[GetTransactionUseCase, Depends(get_get_transaction_use_case)],
) -> TransactionResponse:
    return await use_case.public(reference)


@router.get("/public/transactions/{transaction_id}/status")
async def get_public_transaction_status(
    transaction_id: UUID,
    use_case: Annotated[GetTransactionUseCase, Depends(get_get_transaction_use_case)],
) -> TransactionStatusSnapshot:
    return await use_case.status_snapshot(transaction_id)


@router.get("/payment-accounts/active")
async def get_active_payment_accounts(
    use_case: Annotated[
        GetActivePaymentAccountsUseCase, Depends(get_active_payment_accounts_use_case)
    ],
) -> ActivePaymentAccountsResponse:
    return await use_case.execute()
