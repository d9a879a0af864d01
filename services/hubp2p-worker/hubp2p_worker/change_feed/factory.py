from __future__ import annotations

from redis.asyncio import Redis

from hubp2p_worker.change_feed.contracts import ChangeFeedPublisher
from hubp2p_worker.change_feed.noop import NoopChangeFeedPublisher
from hubp2p_worker.change_feed.redis import RedisChangeFeedPublisher
from hubp2p_worker.core.config import Settings


def build_change_feed_publisher(settings: Settings) -> ChangeFeedPublisher:
    backend = settings.change_feed_backend.strip().lower()
    if backend == "none":
        return NoopChangeFeedPublisher()
    if backend == "redis":
        return RedisChangeFeedPublisher(Redis.from_url(settings.redis_url, decode_responses=True))
    raise ValueError(f"Unsupported change feed backend: {settings.change_feed_backend}")
