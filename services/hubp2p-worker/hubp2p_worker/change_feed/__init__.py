from hubp2p_worker.change_feed.contracts import ChangeFeedPublisher
from hubp2p_worker.change_feed.factory import build_change_feed_publisher
from hubp2p_worker.change_feed.noop import NoopChangeFeedPublisher
from hubp2p_worker.change_feed.redis import RedisChangeFeedPublisher

__all__ = [
    "ChangeFeedPublisher",
    "NoopChangeFeedPublisher",
    "RedisChangeFeedPublisher",
    "build_change_feed_publisher",
]
