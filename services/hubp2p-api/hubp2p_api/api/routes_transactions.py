from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import StreamingResponse

from hubp2p_api.api.dependencies import (
    get_create_transaction_use_case,
    get_get_transaction_use_case,
    get_list_transactions_use_case,
    get_watch_use_case,
    optional_user_id,
    require_user_id,
)
from hubp2p_api.use_cases.create_transaction import CreateTransactionUseCase
from hubp2p_api.use_cases.get_transaction import GetTransactionUseCase
from hubp2p_api.use_cases.list_transactions import ListTransactionsUseCase
from hubp2p_api.use_cases.watch_transaction import WatchTransactionUseCase
from shared.contracts import CreateUserTransactionRequest, TransactionResponse, TransactionStatus

router = APIRouter(tags=["transactions"])


@router.post("/transactions", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    payload: CreateUserTransactionRequest,
    user_id: Annotated[str, Depends(require_user_id)],
    use_case: Annotated[CreateTransactionUseCase, Depends(get_create_transaction_use_case)],
) -> TransactionResponse:
    return await use_case.execute_for_user(user_id, payload)


@router.get("/transactions")
async def list_my_transactions(
    user_id: Annotated[str, Depends(require_user_id)],
    use_case: Annotated[ListTransactionsUseCase, Depends(get_list_transactions_use_case)],
    status_filter: Annotated[TransactionStatus | None, Query(alias="status")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[TransactionResponse]:
    return await use_case.for_user(user_id, status=status_filter, limit=limit, offset=offset)


@router.get("/transactions/{transaction_id}")
async def get_my_transaction(
    transaction_id: UUID,
    user_id: Annotated[str, Depends(require_user_id)],
    use_case: Annotated[GetTransactionUseCase, Depends(get_get_transaction_use_case)],
) -> TransactionResponse:
    return await use_case.for_user(transaction_id, user_id)


@router.get("/transactions/{transaction_id}/watch")
async def watch_transaction(
    transaction_id: UUID,
    request: Request,
    user_id: Annotated[str | None, Depends(optional_user_id)],
    use_case: Annotated[WatchTransactionUseCase, Depends(get_watch_use_case)],
) -> StreamingResponse:
    snapshot = await use_case.open(transaction_id, user_id)
    return StreamingResponse(
        use_case.events(snapshot, user_id, request.is_disconnected),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
