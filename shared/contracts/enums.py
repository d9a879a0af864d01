from __future__ import annotations

from enum import Enum


class TransactionChannel(str, Enum):
    USER = "user"
    API = "api"


class TransactionStatus(str, Enum):
    PENDING_PAYMENT = "pending_payment"
    PAYMENT_RECEIVED = "payment_received"
    CONVERTING = "converting"
    SENT = "sent"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PaymentMethod(str, Enum):
    PIX = "pix"
    TED = "ted"


class CryptoNetwork(str, Enum):
    BITCOIN = "bitcoin"
    ETHEREUM = "ethereum"
    POLYGON = "polygon"
    BSC = "bsc"
    SOLANA = "solana"
    TRON = "tron"


class KycStatus(str, Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationType(str, Enum):
    PUSHOVER = "pushover"
    EMAIL = "email"
    SMS = "sms"


class NotificationKind(str, Enum):
    NEW_TRANSACTION = "new_transaction"
    STATUS_UPDATE = "status_update"


class NotificationStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    PENDING = "pending"


class OutboxStatus(str, Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class EventType(str, Enum):
    NOTIFICATION_REQUESTED = "NotificationRequested"
    TRANSACTION_STATUS_CHANGED = "TransactionStatusChanged"


class RateSource(str, Enum):
    LIVE = "live"
    CACHE = "cache"
    LAST_KNOWN = "last_known"
    FALLBACK = "fallback"


class ErrorCategory(str, Enum):
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    UNAUTHENTICATED = "unauthenticated"
    KYC_DENIED = "kyc_denied"
    INVALID_TRANSITION = "invalid_transition"
    TRANSACTION_EXPIRED = "transaction_expired"
    NO_ACTIVE_PAYMENT_ACCOUNT = "no_active_payment_account"
    CONCURRENCY_CONFLICT = "concurrency_conflict"
    RATE_UNAVAILABLE = "rate_unavailable"
    STORE_UNAVAILABLE = "store_unavailable"
    PROVIDER_TIMEOUT = "provider_timeout"
    PROVIDER_5XX = "provider_5xx"
    PROVIDER_REJECTED = "provider_rejected"
    NOT_CONFIGURED = "not_configured"
