from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest
from hubp2p_worker.commands import dispatch_notification, expire_transactions, relay_status_change
from hubp2p_worker.commands.dispatch_notification import DispatchNotificationCommand
from hubp2p_worker.commands.expire_transactions import ExpireTransactionsCommand
from hubp2p_worker.commands.relay_status_change import RelayStatusChangeCommand
from hubp2p_worker.core.errors import ChangeFeedError
from hubp2p_worker.notifications.dispatcher import DispatchResult

from shared.contracts import (
    EventType,
    NotificationKind,
    TransactionORM,
    TransactionStatus,
    TransactionStatusChangedPayload,
)
from tests.helpers import FakeSession, FakeSessionFactory, make_status_change, make_transaction


class FakeOutboxRepository:
    def __init__(self, _session: object) -> None:
        self.sent: list[tuple[UUID, int]] = []
        self.failed: list[tuple[UUID, int]] = []
        self.rescheduled: list[tuple[UUID, int, float]] = []
        self.changes: list[TransactionStatusChangedPayload] = []

    async def mark_sent(self, event_id: UUID, attempts: int) -> None:
        self.sent.append((event_id, attempts))

    async def mark_failed(self, event_id: UUID, attempts: int) -> None:
        self.failed.append((event_id, attempts))

    async def reschedule(self, event_id: UUID, attempts: int, delay_seconds: float) -> None:
        self.rescheduled.append((event_id, attempts, delay_seconds))

    def add_status_change(self, change: TransactionStatusChangedPayload) -> None:
        self.changes.append(change)


class FakeDispatcher:
    def __init__(self, result: DispatchResult) -> None:
        self._result = result
        self.calls: list[tuple[UUID, NotificationKind]] = []

    async def notify(
        self, _session: object, transaction_id: UUID, kind: NotificationKind
    ) -> DispatchResult:
        self.calls.append((transaction_id, kind))
        return self._result


class FakePublisher:
    def __init__(self, error: Exception | None = None) -> None:
        self._error = error
        self.published: list[TransactionStatusChangedPayload] = []

    @property
    def is_enabled(self) -> bool:
        return True

    async def publish(self, change: TransactionStatusChangedPayload) -> None:
        if self._error is not None:
            raise self._error
        self.published.append(change)

    async def close(self) -> None:
        return None


def _patch_outbox(monkeypatch: pytest.MonkeyPatch, module: object) -> FakeOutboxRepository:
    outbox_repo = FakeOutboxRepository(None)
    monkeypatch.setattr(module, "OutboxRepository", lambda _session: outbox_repo)
    return outbox_repo


def _notification_event(attempts: int = 0) -> SimpleNamespace:
    transaction_id = uuid4()
    return SimpleNamespace(
        event_id=uuid4(),
        aggregate_id=transaction_id,
        event_type=EventType.NOTIFICATION_REQUESTED,
        payload={
            "transaction_id": str(transaction_id),
            "kind": "new_transaction",
            "trace_id": "",
            "traceparent": None,
        },
        attempts=attempts,
    )


def _status_event(attempts: int = 0) -> SimpleNamespace:
    change = make_status_change(
        uuid4(),
        TransactionStatus.PAYMENT_RECEIVED,
        2,
        previous_status=TransactionStatus.PENDING_PAYMENT,
    )
    return SimpleNamespace(
        event_id=uuid4(),
        aggregate_id=change.transaction_id,
        event_type=EventType.TRANSACTION_STATUS_CHANGED,
        payload=change.model_dump(mode="json"),
        attempts=attempts,
    )


@pytest.mark.asyncio
async def test_dispatch_marks_event_sent_on_success(monkeypatch: pytest.MonkeyPatch) -> None:
    outbox_repo = _patch_outbox(monkeypatch, dispatch_notification)
    dispatcher = FakeDispatcher(DispatchResult(success=True, provider_reference="rcpt"))
    session = FakeSession()
    event = _notification_event()

    command = DispatchNotificationCommand(dispatcher)  # type: ignore[arg-type]

    result = await command.execute(session, event)  # type: ignore[arg-type]

    assert result.success is True
    assert dispatcher.calls == [(event.aggregate_id, NotificationKind.NEW_TRANSACTION)]
    assert outbox_repo.sent == [(event.event_id, 1)]
    assert session.commits == 1


@pytest.mark.asyncio
async def test_dispatch_closes_event_as_failed_without_retry(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    outbox_repo = _patch_outbox(monkeypatch, dispatch_notification)
    dispatcher = FakeDispatcher(DispatchResult(success=False, error="Pushover 5xx"))
    session = FakeSession()
    event = _notification_event()

    await DispatchNotificationCommand(dispatcher).execute(session, event)  # type: ignore[arg-type]

    assert outbox_repo.failed == [(event.event_id, 1)]
    assert outbox_repo.rescheduled == []
    assert session.commits == 1


@pytest.mark.asyncio
async def test_relay_publishes_and_marks_sent(monkeypatch: pytest.MonkeyPatch) -> None:
    outbox_repo = _patch_outbox(monkeypatch, relay_status_change)
    publisher = FakePublisher()
    event = _status_event()

    relayed = await RelayStatusChangeCommand(publisher, max_attempts=3).execute(
        FakeSession(), event  # type: ignore[arg-type]
    )

    assert relayed is True
    assert publisher.published[0].status == TransactionStatus.PAYMENT_RECEIVED
    assert outbox_repo.sent == [(event.event_id, 1)]


@pytest.mark.asyncio
async def test_relay_failure_is_rescheduled_with_backoff(monkeypatch: pytest.MonkeyPatch) -> None:
    outbox_repo = _patch_outbox(monkeypatch, relay_status_change)
    monkeypatch.setattr(relay_status_change, "exponential_backoff", lambda *_a, **_k: 0.75)
    session = FakeSession()
    event = _status_event(attempts=1)

    relayed = await RelayStatusChangeCommand(
        FakePublisher(ChangeFeedError("Redis publish failed")), max_attempts=3
    ).execute(session, event)  # type: ignore[arg-type]

    assert relayed is False
    assert outbox_repo.rescheduled == [(event.event_id, 2, 0.75)]
    assert outbox_repo.failed == []
    assert session.commits == 1


@pytest.mark.asyncio
async def test_relay_failure_at_max_attempts_marks_failed(monkeypatch: pytest.MonkeyPatch) -> None:
    outbox_repo = _patch_outbox(monkeypatch, relay_status_change)
    event = _status_event(attempts=2)

    relayed = await RelayStatusChangeCommand(
        FakePublisher(ChangeFeedError("Redis publish failed")), max_attempts=3
    ).execute(FakeSession(), event)  # type: ignore[arg-type]

    assert relayed is False
    assert outbox_repo.failed == [(event.event_id, 3)]
    assert outbox_repo.rescheduled == []


class FakeTransactionRepository:
    overdue: list[TransactionORM] = []
    lost: set[UUID] = set()

    def __init__(self, _session: object) -> None:
        pass

    async def list_overdue_pending(self, _now: datetime, limit: int) -> list[TransactionORM]:
        return self.overdue[:limit]

    async def mark_expired(self, transaction: TransactionORM, _now: datetime) -> bool:
        return transaction.id not in self.lost


@pytest.mark.asyncio
async def test_expire_command_skips_rows_changed_concurrently(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    outbox_repo = _patch_outbox(monkeypatch, expire_transactions)
    first, second = make_transaction(version=1), make_transaction(version=1)
    FakeTransactionRepository.overdue = [first, second]
    FakeTransactionRepository.lost = {second.id}
    monkeypatch.setattr(expire_transactions, "TransactionRepository", FakeTransactionRepository)
    session = FakeSession()

    expired = await ExpireTransactionsCommand(
        FakeSessionFactory(session), batch_size=10  # type: ignore[arg-type]
    ).execute()

    assert expired == 1
    [change] = outbox_repo.changes
    assert change.transaction_id == first.id
    assert change.previous_status == TransactionStatus.PENDING_PAYMENT
    assert change.status == TransactionStatus.EXPIRED
    assert change.version == 2
    assert session.commits == 1
