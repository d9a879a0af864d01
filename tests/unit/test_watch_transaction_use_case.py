from __future__ import annotations

import json
from collections.abc import AsyncIterator
from datetime import timedelta
from uuid import UUID, uuid4

import pytest
from hubp2p_api.use_cases.watch_transaction import WatchTransactionUseCase, format_sse

from shared.contracts import (
    TransactionStatus,
    TransactionStatusChangedPayload,
    TransactionStatusSnapshot,
)
from tests.helpers import FIXED_NOW, make_status_change


def _snapshot(
    transaction_id: UUID, status: TransactionStatus, version: int
) -> TransactionStatusSnapshot:
    return TransactionStatusSnapshot(
        id=transaction_id,
        transaction_number="TXN-20260314-000001",
        status=status,
        updated_at=FIXED_NOW,
        expires_at=FIXED_NOW + timedelta(minutes=40),
        seconds_remaining=0,
        version=version,
    )


class FakeGetTransaction:
    def __init__(self, snapshots: list[TransactionStatusSnapshot]) -> None:
        self._snapshots = snapshots
        self.calls = 0

    async def status_snapshot(
        self, _transaction_id: UUID, *, user_id: str | None
    ) -> TransactionStatusSnapshot:
        self.calls += 1
        if len(self._snapshots) > 1:
            return self._snapshots.pop(0)
        return self._snapshots[0]


class FakeSubscriber:
    def __init__(self, changes: list[TransactionStatusChangedPayload | None]) -> None:
        self._changes = changes
        self.closed = False

    async def listen(
        self, _transaction_id: UUID
    ) -> AsyncIterator[TransactionStatusChangedPayload | None]:
        try:
            for change in self._changes:
                yield change
        finally:
            self.closed = True


async def _connected() -> bool:
    return False


async def _collect(stream: AsyncIterator[str]) -> list[str]:
    return [frame async for frame in stream]


def _event_names(frames: list[str]) -> list[str]:
    return [frame.split("\n", 1)[0] for frame in frames]


def _status_of(frame: str) -> str:
    data_line = frame.split("\n")[1]
    return json.loads(data_line.removeprefix("data: "))["status"]


def test_format_sse_frames_event_and_data() -> None:
    assert format_sse("status", '{"a":1}') == 'event: status\ndata: {"a":1}\n\n'


@pytest.mark.asyncio
async def test_stream_starts_with_snapshot_and_drops_duplicates() -> None:
    transaction_id = uuid4()
    received = make_status_change(transaction_id, TransactionStatus.PAYMENT_RECEIVED, 2)
    subscriber = FakeSubscriber(
        [
            received,
            received,
            make_status_change(transaction_id, TransactionStatus.SENT, 4),
            make_status_change(transaction_id, TransactionStatus.CANCELLED, 5),
        ]
    )
    snapshot = _snapshot(transaction_id, TransactionStatus.PENDING_PAYMENT, 1)
    use_case = WatchTransactionUseCase(
        FakeGetTransaction([snapshot]),  # type: ignore[arg-type]
        subscriber,  # type: ignore[arg-type]
        heartbeat_seconds=1000,
    )

    frames = await _collect(use_case.events(snapshot, "user-1", _connected))

    assert _event_names(frames) == ["event: snapshot", "event: status", "event: status"]
    assert [_status_of(frame) for frame in frames] == [
        "pending_payment",
        "payment_received",
        "sent",
    ]
    assert subscriber.closed is True


@pytest.mark.asyncio
async def test_heartbeat_resync_recovers_missed_publish_then_polls() -> None:
    transaction_id = uuid4()
    snapshot = _snapshot(transaction_id, TransactionStatus.PAYMENT_RECEIVED, 2)
    get_transaction = FakeGetTransaction(
        [
            _snapshot(transaction_id, TransactionStatus.CONVERTING, 3),
            _snapshot(transaction_id, TransactionStatus.SENT, 4),
        ]
    )
    use_case = WatchTransactionUseCase(
        get_transaction,  # type: ignore[arg-type]
        FakeSubscriber([None]),  # type: ignore[arg-type]
        heartbeat_seconds=0,
    )

    frames = await _collect(use_case.events(snapshot, None, _connected))

    assert [_status_of(frame) for frame in frames] == ["payment_received", "converting", "sent"]
    assert get_transaction.calls == 2


@pytest.mark.asyncio
async def test_polling_fallback_emits_keep_alive_while_unchanged() -> None:
    transaction_id = uuid4()
    snapshot = _snapshot(transaction_id, TransactionStatus.PENDING_PAYMENT, 1)
    get_transaction = FakeGetTransaction(
        [snapshot, _snapshot(transaction_id, TransactionStatus.EXPIRED, 2)]
    )
    use_case = WatchTransactionUseCase(
        get_transaction,  # type: ignore[arg-type]
        None,
        heartbeat_seconds=0,
    )

    frames = await _collect(use_case.events(snapshot, None, _connected))

    assert frames[1] == ": keep-alive\n\n"
    assert _status_of(frames[2]) == "expired"
    assert len(frames) == 3


@pytest.mark.asyncio
async def test_terminal_snapshot_closes_stream_immediately() -> None:
    transaction_id = uuid4()
    snapshot = _snapshot(transaction_id, TransactionStatus.SENT, 4)
    subscriber = FakeSubscriber([make_status_change(transaction_id, TransactionStatus.SENT, 4)])
    use_case = WatchTransactionUseCase(
        FakeGetTransaction([snapshot]),  # type: ignore[arg-type]
        subscriber,  # type: ignore[arg-type]
        heartbeat_seconds=1000,
    )

    frames = await _collect(use_case.events(snapshot, None, _connected))

    assert _event_names(frames) == ["event: snapshot"]


@pytest.mark.asyncio
async def test_disconnect_stops_stream() -> None:
    transaction_id = uuid4()
    snapshot = _snapshot(transaction_id, TransactionStatus.PENDING_PAYMENT, 1)
    subscriber = FakeSubscriber(
        [make_status_change(transaction_id, TransactionStatus.PAYMENT_RECEIVED, 2)]
    )

    async def disconnected() -> bool:
        return True

    use_case = WatchTransactionUseCase(
        FakeGetTransaction([snapshot]),  # type: ignore[arg-type]
        subscriber,  # type: ignore[arg-type]
        heartbeat_seconds=1000,
    )

    frames = await _collect(use_case.events(snapshot, None, disconnected))

    assert _event_names(frames) == ["event: snapshot"]
    assert subscriber.closed is True
