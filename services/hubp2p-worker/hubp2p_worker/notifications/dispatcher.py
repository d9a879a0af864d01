from __future__ import annotations

import time
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hubp2p_worker.core.errors import WorkerError
from hubp2p_worker.core.metrics import notifications_total, pushover_latency
from hubp2p_worker.notifications.formatter import (
    NotificationContent,
    format_missing_transaction,
    format_notification,
)
from hubp2p_worker.providers.pushover import PushoverClient, PushoverMessage
from hubp2p_worker.repositories.notification_log_repository import NotificationLogRepository
from hubp2p_worker.repositories.transaction_repository import TransactionRepository
from shared.contracts import NotificationKind, NotificationStatus
from shared.logging import NOTIFICATION_KIND, TRANSACTION_ID, get_logger
from shared.utils.time import utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    success: bool
    error: str | None = None
    provider_reference: str | None = None


class NotificationDispatcher:
    """Sends one staff alert per call and records exactly one notification log row.

    The log row is added to the caller's session; the caller commits it together with
    whatever bookkeeping triggered the dispatch.
    """

    def __init__(
        self,
        client: PushoverClient,
        *,
        recipient: str,
        priority: int,
        panel_url: str | None = None,
    ) -> None:
        self._client = client
        self._recipient = recipient
        self._priority = priority
        self._panel_url = panel_url

    async def notify(
        self, session: AsyncSession, transaction_id: UUID, kind: NotificationKind
    ) -> DispatchResult:
        row = await TransactionRepository(session).get_with_owner(transaction_id)
        if row is None:
            content = format_missing_transaction(transaction_id)
            result = DispatchResult(success=False, error="Transaction not found")
        else:
            transaction, owner = row
            content = format_notification(transaction, owner, kind)
            result = await self._send(content, transaction_id)

        NotificationLogRepository(session).add(
            transaction_id=transaction_id,
            kind=kind,
            recipient=self._recipient,
            title=content.title,
            message=content.message,
            status=NotificationStatus.SENT if result.success else NotificationStatus.FAILED,
            sent_at=utc_now(),
            error_message=result.error,
            provider_reference=result.provider_reference,
        )
        notifications_total.add(
            1,
            {"kind": kind.value, "status": "sent" if result.success else "failed"},
        )
        log_fields = {TRANSACTION_ID: str(transaction_id), NOTIFICATION_KIND: kind.value}
        if result.success:
            logger.info("notification_dispatched", extra={"extra_fields": log_fields})
        else:
            logger.warning(
                "notification_failed",
                extra={"extra_fields": {**log_fields, "error": result.error}},
            )
        return result

    async def _send(self, content: NotificationContent, transaction_id: UUID) -> DispatchResult:
        message = PushoverMessage(
            title=content.title,
            message=content.message,
            priority=self._priority,
            url=f"{self._panel_url.rstrip('/')}/transactions/{transaction_id}"
            if self._panel_url
            else None,
            url_title="Abrir no painel" if self._panel_url else None,
        )
        start = time.perf_counter()
        try:
            receipt = await self._client.send(message)
        except WorkerError as exc:
            return DispatchResult(success=False, error=exc.message)
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "notification_unexpected_error",
                extra={"extra_fields": {TRANSACTION_ID: str(transaction_id)}},
            )
            return DispatchResult(success=False, error=f"Unexpected error: {type(exc).__name__}")
        finally:
            pushover_latency.record((time.perf_counter() - start) * 1000)
        return DispatchResult(success=True, provider_reference=receipt.reference)
