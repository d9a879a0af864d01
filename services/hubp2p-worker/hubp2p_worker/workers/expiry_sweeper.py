from __future__ import annotations

import asyncio

from hubp2p_worker.commands.expire_transactions import ExpireTransactionsCommand
from hubp2p_worker.core.config import Settings
from shared.logging import get_logger

logger = get_logger(__name__)


class ExpirySweeper:
    def __init__(self, settings: Settings, command: ExpireTransactionsCommand) -> None:
        self._settings = settings
        self._command = command

    async def run_forever(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "expiry_sweep_failed",
                    extra={"extra_fields": {"error_type": type(exc).__name__}},
                )
            await asyncio.sleep(self._settings.expiry_sweep_interval_seconds)

    async def run_once(self) -> int:
        expired = await self._command.execute()
        if expired:
            logger.info("expiry_sweep_completed", extra={"extra_fields": {"expired": expired}})
        return expired
