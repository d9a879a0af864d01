from __future__ import annotations

import asyncio

from hubp2p_worker.change_feed import build_change_feed_publisher
from hubp2p_worker.commands.dispatch_notification import DispatchNotificationCommand
from hubp2p_worker.commands.expire_transactions import ExpireTransactionsCommand
from hubp2p_worker.commands.relay_status_change import RelayStatusChangeCommand
from hubp2p_worker.core.config import get_settings
from hubp2p_worker.db.session import build_engine, build_session_factory
from hubp2p_worker.notifications.dispatcher import NotificationDispatcher
from hubp2p_worker.providers.factory import PushoverClientFactory
from hubp2p_worker.workers.expiry_sweeper import ExpirySweeper
from hubp2p_worker.workers.outbox_worker import OutboxWorker
from shared.logging import configure_logging, get_logger
from shared.observability import configure_otel

logger = get_logger(__name__)


async def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, settings.service_name)
    configure_otel(settings.service_name)

    engine = build_engine(settings.postgres_dsn)
    session_factory = build_session_factory(engine)

    pushover_client = PushoverClientFactory(settings).create()
    if not settings.pushover_configured:
        logger.warning("pushover_not_configured")
    publisher = build_change_feed_publisher(settings)

    dispatcher = NotificationDispatcher(
        pushover_client,
        recipient=settings.notification_recipient,
        priority=settings.pushover_priority,
        panel_url=settings.admin_panel_url,
    )
    outbox_worker = OutboxWorker(
        settings,
        session_factory,
        DispatchNotificationCommand(dispatcher),
        RelayStatusChangeCommand(publisher, max_attempts=settings.max_event_attempts),
    )
    sweeper = ExpirySweeper(
        settings, ExpireTransactionsCommand(session_factory, settings.expiry_batch_size)
    )

    try:
        await asyncio.gather(outbox_worker.run_forever(), sweeper.run_forever())
    finally:
        await pushover_client.close()
        await publisher.close()
        await engine.dispose()


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("worker_stopped")


if __name__ == "__main__":
    main()
