from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from shared.constants.transaction_lifecycle import is_terminal
from shared.contracts import TransactionStatus, TransactionStatusChangedPayload


@dataclass
class StatusChangeTracker:
    """Collapses duplicate or out-of-order change notices for a single transaction.

    Publishers deliver at least once and the watcher may also poll, so the same
    (status, version) pair can arrive more than once.
    """

    transaction_id: UUID
    last_status: TransactionStatus | None = None
    last_version: int = 0
    _closed: bool = field(default=False, init=False)

    def accept(self, change: TransactionStatusChangedPayload) -> bool:
        if change.transaction_id != self.transaction_id or self._closed:
            return False
        if change.version <= self.last_version:
            return False
        self.last_version = change.version
        if change.status == self.last_status:
            return False
        self.last_status = change.status
        if is_terminal(change.status):
            self._closed = True
        return True

    def seed(self, status: TransactionStatus, version: int) -> None:
        self.last_status = status
        self.last_version = version
        self._closed = is_terminal(status)

    @property
    def finished(self) -> bool:
        return self._closed
