from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hubp2p_api.repositories.transaction_repository import (
    TransactionFilters,
    TransactionRepository,
)
from hubp2p_api.use_cases.transaction_views import to_admin_response, to_transaction_response
from shared.contracts import (
    TransactionChannel,
    TransactionPage,
    TransactionResponse,
    TransactionStatus,
)
from shared.utils.time import utc_now
from shared.utils.validation import blank_to_none


class ListTransactionsUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def for_admin(
        self,
        *,
        status: TransactionStatus | None,
        channel: TransactionChannel | None,
        search: str | None,
        limit: int,
        offset: int,
    ) -> TransactionPage:
        filters = TransactionFilters(status=status, channel=channel, search=blank_to_none(search))
        async with self._session_factory() as session:
            rows, total = await TransactionRepository(session).list_with_owners(
                filters, limit=limit, offset=offset
            )
        now = utc_now()
        return TransactionPage(
            items=[to_admin_response(transaction, owner, now) for transaction, owner in rows],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def for_user(
        self,
        user_id: str,
        *,
        status: TransactionStatus | None,
        limit: int,
        offset: int,
    ) -> list[TransactionResponse]:
        filters = TransactionFilters(
            status=status, channel=TransactionChannel.USER, user_id=user_id
        )
        async with self._session_factory() as session:
            rows, _ = await TransactionRepository(session).list_with_owners(
                filters, limit=limit, offset=offset
            )
        now = utc_now()
        return [to_transaction_response(transaction, now) for transaction, _owner in rows]
