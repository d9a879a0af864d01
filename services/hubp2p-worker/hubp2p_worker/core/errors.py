from __future__ import annotations

from dataclasses import dataclass

from shared.contracts.enums import ErrorCategory


@dataclass
class WorkerError(Exception):
    category: ErrorCategory
    message: str

    def __str__(self) -> str:
        return self.message


class PushoverTimeoutError(WorkerError):
    def __init__(self, message: str = "Pushover timeout") -> None:
        super().__init__(ErrorCategory.PROVIDER_TIMEOUT, message)


class Pushover5xxError(WorkerError):
    def __init__(self, message: str = "Pushover 5xx") -> None:
        super().__init__(ErrorCategory.PROVIDER_5XX, message)


class PushoverRejectedError(WorkerError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCategory.PROVIDER_REJECTED, message)


class NotConfiguredError(WorkerError):
    def __init__(self, message: str = "Pushover credentials are not configured") -> None:
        super().__init__(ErrorCategory.NOT_CONFIGURED, message)


class ChangeFeedError(WorkerError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCategory.STORE_UNAVAILABLE, message)
