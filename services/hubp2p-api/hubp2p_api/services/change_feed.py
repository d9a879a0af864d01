from __future__ import annotations

from collections.abc import AsyncIterator
from uuid import UUID

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from shared.constants import transaction_channel
from shared.contracts import TransactionStatusChangedPayload
from shared.logging import TRANSACTION_ID, get_logger

logger = get_logger(__name__)


class RedisChangeSubscriber:
    def __init__(self, redis_client: Redis, poll_timeout_seconds: float = 1.0) -> None:
        self._redis = redis_client
        self._poll_timeout_seconds = poll_timeout_seconds

    async def listen(
        self, transaction_id: UUID
    ) -> AsyncIterator[TransactionStatusChangedPayload | None]:
        """Yields changes for one transaction, or ``None`` on every idle poll tick."""
        channel = transaction_channel(transaction_id)
        pubsub = self._redis.pubsub()
        try:
            await pubsub.subscribe(channel)
            while True:
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=self._poll_timeout_seconds
                )
                if message is None:
                    yield None
                    continue
                try:
                    yield TransactionStatusChangedPayload.model_validate_json(message["data"])
                except ValidationError:
                    logger.warning(
                        "change_feed_message_invalid",
                        extra={"extra_fields": {TRANSACTION_ID: str(transaction_id)}},
                    )
        except RedisError:
            logger.warning(
                "change_feed_unavailable",
                extra={"extra_fields": {TRANSACTION_ID: str(transaction_id)}},
            )
        finally:
            try:
                await pubsub.unsubscribe(channel)
                await pubsub.aclose()
            except RedisError:
                logger.debug(
                    "change_feed_cleanup_failed",
                    extra={"extra_fields": {TRANSACTION_ID: str(transaction_id)}},
                )
