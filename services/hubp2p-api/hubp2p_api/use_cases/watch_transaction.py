from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from uuid import UUID

from hubp2p_api.services.change_feed import RedisChangeSubscriber
from hubp2p_api.use_cases.get_transaction import GetTransactionUseCase
from shared.contracts import TransactionStatusChangedPayload, TransactionStatusSnapshot
from shared.logging import TRANSACTION_ID, get_logger
from shared.realtime import StatusChangeTracker

logger = get_logger(__name__)
_KEEP_ALIVE = ": keep-alive\n\n"


def format_sse(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


class WatchTransactionUseCase:
    """Streams status changes of one transaction as server-sent events.

    The first event is always a snapshot read from the database. Later events come from
    the Redis change feed and are re-checked against the database on every heartbeat, so a
    missed publish is recovered within one heartbeat interval.
    """

    def __init__(
        self,
        get_transaction: GetTransactionUseCase,
        subscriber: RedisChangeSubscriber | None,
        heartbeat_seconds: float,
    ) -> None:
        self._get_transaction = get_transaction
        self._subscriber = subscriber
        self._heartbeat_seconds = heartbeat_seconds

    async def open(
        self, transaction_id: UUID, user_id: str | None
    ) -> TransactionStatusSnapshot:
        return await self._get_transaction.status_snapshot(transaction_id, user_id=user_id)

    async def events(
        self,
        snapshot: TransactionStatusSnapshot,
        user_id: str | None,
        is_disconnected: Callable[[], Awaitable[bool]],
    ) -> AsyncIterator[str]:
        tracker = StatusChangeTracker(snapshot.id)
        tracker.seed(snapshot.status, snapshot.version)
        yield format_sse("snapshot", snapshot.model_dump_json())
        if tracker.finished:
            return

        last_beat = time.monotonic()
        if self._subscriber is not None:
            async with aclosing(self._subscriber.listen(snapshot.id)) as changes:
                async for change in changes:
                    if await is_disconnected():
                        return
                    if change is not None and tracker.accept(change):
                        yield format_sse("status", change.model_dump_json())
                    elif time.monotonic() - last_beat >= self._heartbeat_seconds:
                        yield await self._resync(tracker, user_id)
                        last_beat = time.monotonic()
                    if tracker.finished:
                        return

        logger.info(
            "watch_polling_fallback", extra={"extra_fields": {TRANSACTION_ID: str(snapshot.id)}}
        )
        while not tracker.finished and not await is_disconnected():
            await asyncio.sleep(self._heartbeat_seconds)
            yield await self._resync(tracker, user_id)

    async def _resync(self, tracker: StatusChangeTracker, user_id: str | None) -> str:
        latest = await self._get_transaction.status_snapshot(
            tracker.transaction_id, user_id=user_id
        )
        change = TransactionStatusChangedPayload(
            transaction_id=latest.id,
            transaction_number=latest.transaction_number,
            previous_status=tracker.last_status,
            status=latest.status,
            updated_at=latest.updated_at,
            version=latest.version,
        )
        if tracker.accept(change):
            return format_sse("status", change.model_dump_json())
        return _KEEP_ALIVE
