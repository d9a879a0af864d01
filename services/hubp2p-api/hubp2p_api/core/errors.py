from __future__ import annotations

from dataclasses import dataclass

from shared.contracts.enums import ErrorCategory, TransactionStatus

_UNAUTHENTICATED_MESSAGE = "Authentication required"


@dataclass
class AppError(Exception):
    category: ErrorCategory
    message: str
    http_status: int = 400

    def __str__(self) -> str:
        return self.message


class ValidationAppError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCategory.VALIDATION_ERROR, message, http_status=422)


class NotFoundError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCategory.NOT_FOUND, message, http_status=404)


class UnauthenticatedError(AppError):
    def __init__(self, message: str = _UNAUTHENTICATED_MESSAGE) -> None:
        super().__init__(ErrorCategory.UNAUTHENTICATED, message, http_status=401)


class KycDeniedError(AppError):
    def __init__(self, message: str = "KYC verification must be approved") -> None:
        super().__init__(ErrorCategory.KYC_DENIED, message, http_status=403)


class InvalidTransitionError(AppError):
    def __init__(self, current: TransactionStatus | str, target: TransactionStatus | str) -> None:
        current_value = getattr(current, "value", current)
        target_value = getattr(target, "value", target)
        super().__init__(
            ErrorCategory.INVALID_TRANSITION,
            f"Cannot move from {current_value} to {target_value}",
            http_status=409,
        )


class TransactionExpiredError(AppError):
    def __init__(self, message: str = "Transaction payment window has elapsed") -> None:
        super().__init__(ErrorCategory.TRANSACTION_EXPIRED, message, http_status=409)


class NoActivePaymentAccountError(AppError):
    def __init__(self, message: str = "No active payment account for this method") -> None:
        super().__init__(ErrorCategory.NO_ACTIVE_PAYMENT_ACCOUNT, message, http_status=422)


class ConcurrencyConflictError(AppError):
    def __init__(self, message: str = "Concurrent update conflict") -> None:
        super().__init__(ErrorCategory.CONCURRENCY_CONFLICT, message, http_status=409)


class RateUnavailableError(AppError):
    def __init__(self, message: str = "Exchange rate is unavailable") -> None:
        super().__init__(ErrorCategory.RATE_UNAVAILABLE, message, http_status=503)


class StoreUnavailableError(AppError):
    def __init__(self, message: str = "Storage is unavailable") -> None:
        super().__init__(ErrorCategory.STORE_UNAVAILABLE, message, http_status=503)


@dataclass
class RateProviderError(Exception):
    category: ErrorCategory
    message: str


class RateProviderTimeoutError(RateProviderError):
    def __init__(self, message: str = "Rate provider timeout") -> None:
        super().__init__(ErrorCategory.PROVIDER_TIMEOUT, message)


class RateProvider5xxError(RateProviderError):
    def __init__(self, message: str = "Rate provider 5xx") -> None:
        super().__init__(ErrorCategory.PROVIDER_5XX, message)


class RateProviderRejectedError(RateProviderError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCategory.PROVIDER_REJECTED, message)
