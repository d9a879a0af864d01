from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hubp2p_api.core.errors import NotFoundError
from hubp2p_api.repositories.transaction_repository import TransactionRepository
from hubp2p_api.use_cases.transaction_views import (
    to_admin_response,
    to_status_snapshot,
    to_transaction_response,
)
from shared.contracts import (
    AdminTransactionResponse,
    TransactionChannel,
    TransactionORM,
    TransactionResponse,
    TransactionStatusSnapshot,
)
from shared.utils.ids import parse_uuid
from shared.utils.time import utc_now

_NOT_FOUND_MESSAGE = "Transaction not found"


class GetTransactionUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def for_admin(self, transaction_id: UUID) -> AdminTransactionResponse:
        async with self._session_factory() as session:
            row = await TransactionRepository(session).get_with_owner(transaction_id)
        if row is None:
            raise NotFoundError(_NOT_FOUND_MESSAGE)
        transaction, owner = row
        return to_admin_response(transaction, owner, utc_now())

    async def for_user(self, transaction_id: UUID, user_id: str) -> TransactionResponse:
        transaction = await self._load_visible(transaction_id, user_id=user_id)
        return to_transaction_response(transaction, utc_now())

    async def public(self, reference: str) -> TransactionResponse:
        async with self._session_factory() as session:
            repository = TransactionRepository(session)
            transaction_id = parse_uuid(reference)
            if transaction_id is not None:
                transaction = await repository.get_by_id(transaction_id)
            else:
                transaction = await repository.get_by_number(reference.strip().upper())
        if transaction is None or transaction.channel != TransactionChannel.API:
            raise NotFoundError(_NOT_FOUND_MESSAGE)
        return to_transaction_response(transaction, utc_now())

    async def status_snapshot(
        self, transaction_id: UUID, *, user_id: str | None = None
    ) -> TransactionStatusSnapshot:
        transaction = await self._load_visible(transaction_id, user_id=user_id)
        return to_status_snapshot(transaction, utc_now())

    async def _load_visible(self, transaction_id: UUID, *, user_id: str | None) -> TransactionORM:
        async with self._session_factory() as session:
            transaction = await TransactionRepository(session).get_by_id(transaction_id)
        if transaction is None or not _is_visible(transaction, user_id):
            raise NotFoundError(_NOT_FOUND_MESSAGE)
        return transaction


def _is_visible(transaction: TransactionORM, user_id: str | None) -> bool:
    if transaction.channel == TransactionChannel.API:
        return True
    return user_id is not None and transaction.user_id == user_id
