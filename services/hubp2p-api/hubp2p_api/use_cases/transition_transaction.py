from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hubp2p_api.core.errors import ConcurrencyConflictError, NotFoundError
from hubp2p_api.core.metrics import status_transitions_total
from hubp2p_api.db.guards import store_write
from hubp2p_api.repositories.outbox_repository import OutboxRepository
from hubp2p_api.repositories.transaction_repository import TransactionRepository
from hubp2p_api.services.admin_session_service import AdminPrincipal
from hubp2p_api.services.lifecycle_service import LifecycleService
from hubp2p_api.use_cases.transaction_views import to_admin_response
from shared.contracts import (
    AdminNotesRequest,
    AdminTransactionResponse,
    NotificationKind,
    TransactionStatus,
    TransitionRequest,
)
from shared.logging import (
    ADMIN_ID,
    PREVIOUS_STATUS,
    STATUS,
    TRANSACTION_ID,
    get_logger,
    update_correlation_context,
)
from shared.utils.time import utc_now

logger = get_logger(__name__)


class TransitionTransactionUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._lifecycle = LifecycleService()

    async def execute(
        self, transaction_id: UUID, request: TransitionRequest, admin: AdminPrincipal
    ) -> AdminTransactionResponse:
        update_correlation_context(
            {TRANSACTION_ID: str(transaction_id), ADMIN_ID: str(admin.admin_id)}
        )
        async with self._session_factory() as session:
            transactions = TransactionRepository(session)
            row = await transactions.get_with_owner(transaction_id)
            if row is None:
                raise NotFoundError("Transaction not found")
            transaction, owner = row

            now = utc_now()
            plan = self._lifecycle.plan_transition(
                transaction,
                request.status,
                now=now,
                tx_hash=request.tx_hash,
                admin_notes=request.admin_notes,
                crypto_amount=request.crypto_amount,
            )

            async with store_write(session, "transition_transaction"):
                if not await transactions.apply_transition(plan):
                    await session.rollback()
                    raise ConcurrencyConflictError(
                        "Transaction was modified concurrently; reload and retry"
                    )
                outbox = OutboxRepository(session)
                outbox.add_notification_request(transaction_id, NotificationKind.STATUS_UPDATE)
                outbox.add_status_change(self._lifecycle.status_changed_payload(transaction, plan))
                await session.commit()
            await session.refresh(transaction)

        status_transitions_total.add(1, {"to_status": plan.to_status.value})
        logger.info(
            "transaction_status_changed",
            extra={
                "extra_fields": {
                    PREVIOUS_STATUS: plan.from_status.value,
                    STATUS: plan.to_status.value,
                    "version": plan.next_version,
                }
            },
        )
        return to_admin_response(transaction, owner, now)


class CancelTransactionUseCase:
    def __init__(self, transition: TransitionTransactionUseCase) -> None:
        self._transition = transition

    async def execute(
        self, transaction_id: UUID, admin: AdminPrincipal, admin_notes: str | None = None
    ) -> AdminTransactionResponse:
        return await self._transition.execute(
            transaction_id,
            TransitionRequest(status=TransactionStatus.CANCELLED, admin_notes=admin_notes),
            admin,
        )


class UpdateAdminNotesUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(
        self, transaction_id: UUID, request: AdminNotesRequest
    ) -> AdminTransactionResponse:
        async with self._session_factory() as session:
            transactions = TransactionRepository(session)
            now = utc_now()
            async with store_write(session, "update_admin_notes"):
                updated = await transactions.update_admin_notes(
                    transaction_id, request.admin_notes, now
                )
                if not updated:
                    raise NotFoundError("Transaction not found")
                await session.commit()
            row = await transactions.get_with_owner(transaction_id)
            if row is None:
                raise NotFoundError("Transaction not found")
            transaction, owner = row
            return to_admin_response(transaction, owner, now)
