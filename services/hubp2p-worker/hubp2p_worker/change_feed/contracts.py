from __future__ import annotations

from typing import Protocol

from shared.contracts import TransactionStatusChangedPayload


class ChangeFeedPublisher(Protocol):
    @property
    def is_enabled(self) -> bool: ...

    async def publish(self, change: TransactionStatusChangedPayload) -> None: ...

    async def close(self) -> None: ...
