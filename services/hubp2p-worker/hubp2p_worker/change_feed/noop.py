from __future__ import annotations

from shared.contracts import TransactionStatusChangedPayload


class NoopChangeFeedPublisher:
    @property
    def is_enabled(self) -> bool:
        return False

    async def publish(self, change: TransactionStatusChangedPayload) -> None:  # noqa: ARG002
        return None

    async def close(self) -> None:
        return None
