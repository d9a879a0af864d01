from __future__ import annotations

from redis.asyncio import Redis
from redis.exceptions import RedisError

from hubp2p_worker.core.errors import ChangeFeedError
from shared.constants import transaction_channel
from shared.contracts import TransactionStatusChangedPayload


class RedisChangeFeedPublisher:
    """Publishes status changes on the per-transaction pub/sub channel watched by the API."""

    def __init__(self, redis_client: Redis) -> None:
        self._redis = redis_client

    @property
    def is_enabled(self) -> bool:
        return True

    async def publish(self, change: TransactionStatusChangedPayload) -> None:
        channel = transaction_channel(change.transaction_id)
        try:
            await self._redis.publish(channel, change.model_dump_json())
        except RedisError as exc:
            raise ChangeFeedError(f"Redis publish failed: {exc}") from exc

    async def close(self) -> None:
        await self._redis.aclose()
