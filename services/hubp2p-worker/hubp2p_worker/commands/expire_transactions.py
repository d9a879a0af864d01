from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hubp2p_worker.core.metrics import transactions_expired_total
from hubp2p_worker.repositories.outbox_repository import OutboxRepository
from hubp2p_worker.repositories.transaction_repository import TransactionRepository
from shared.contracts import TransactionStatus, TransactionStatusChangedPayload
from shared.logging import TRANSACTION_ID, TRANSACTION_NUMBER, get_logger
from shared.utils.time import utc_now

logger = get_logger(__name__)


class ExpireTransactionsCommand:
    """Moves overdue pending_payment transactions to expired.

    Each row is expired with a conditional update, so a concurrent admin transition
    wins and the row is skipped. Expiry does not page staff.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], batch_size: int) -> None:
        self._session_factory = session_factory
        self._batch_size = batch_size

    async def execute(self) -> int:
        now = utc_now()
        expired = 0
        async with self._session_factory() as session:
            transaction_repo = TransactionRepository(session)
            outbox_repo = OutboxRepository(session)
            for transaction in await transaction_repo.list_overdue_pending(now, self._batch_size):
                if not await transaction_repo.mark_expired(transaction, now):
                    continue
                outbox_repo.add_status_change(
                    TransactionStatusChangedPayload(
                        transaction_id=transaction.id,
                        transaction_number=transaction.transaction_number,
                        previous_status=TransactionStatus.PENDING_PAYMENT,
                        status=TransactionStatus.EXPIRED,
                        updated_at=now,
                        version=transaction.version + 1,
                    )
                )
                expired += 1
                logger.info(
                    "transaction_expired",
                    extra={
                        "extra_fields": {
                            TRANSACTION_ID: str(transaction.id),
                            TRANSACTION_NUMBER: transaction.transaction_number,
                        }
                    },
                )
            await session.commit()
        if expired:
            transactions_expired_total.add(expired)
        return expired
