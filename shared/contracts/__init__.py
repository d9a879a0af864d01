from shared.contracts.dto import (
    ActivePaymentAccountsResponse,
    ActivePixInstructions,
    ActiveTedInstructions,
    AdminNotesRequest,
    AdminTransactionResponse,
    CreateApiTransactionRequest,
    CreatePaymentAccountRequest,
    CreateUserTransactionRequest,
    DailyVolume,
    DashboardStatsResponse,
    KycRejectRequest,
    KycSubmissionRequest,
    KycVerificationResponse,
    NotificationEnqueuedResponse,
    NotificationLogResponse,
    PaymentAccountResponse,
    PaymentInstructions,
    QuoteResponse,
    TransactionPage,
    TransactionResponse,
    TransactionStatusSnapshot,
    TransitionRequest,
)
from shared.contracts.enums import (
    CryptoNetwork,
    ErrorCategory,
    EventType,
    KycStatus,
    NotificationKind,
    NotificationStatus,
    NotificationType,
    OutboxStatus,
    PaymentMethod,
    RateSource,
    TransactionChannel,
    TransactionStatus,
)
from shared.contracts.events import NotificationRequestedPayload, TransactionStatusChangedPayload
from shared.contracts.persistence import (
    AdminSessionORM,
    AdminUserORM,
    Base,
    KycVerificationORM,
    NotificationLogORM,
    OutboxEventORM,
    PaymentAccountORM,
    ProfileORM,
    TransactionORM,
    transaction_number_seq,
)

__all__ = [
    "ActivePaymentAccountsResponse",
    "ActivePixInstructions",
    "ActiveTedInstructions",
    "AdminNotesRequest",
    "AdminSessionORM",
    "AdminTransactionResponse",
    "AdminUserORM",
    "Base",
    "CreateApiTransactionRequest",
    "CreatePaymentAccountRequest",
    "CreateUserTransactionRequest",
    "CryptoNetwork",
    "DailyVolume",
    "DashboardStatsResponse",
    "ErrorCategory",
    "EventType",
    "KycRejectRequest",
    "KycStatus",
    "KycSubmissionRequest",
    "KycVerificationORM",
    "KycVerificationResponse",
    "NotificationEnqueuedResponse",
    "NotificationKind",
    "NotificationLogORM",
    "NotificationLogResponse",
    "NotificationRequestedPayload",
    "NotificationStatus",
    "NotificationType",
    "OutboxEventORM",
    "OutboxStatus",
    "PaymentAccountORM",
    "PaymentAccountResponse",
    "PaymentInstructions",
    "PaymentMethod",
    "ProfileORM",
    "QuoteResponse",
    "RateSource",
    "TransactionChannel",
    "TransactionORM",
    "TransactionPage",
    "TransactionResponse",
    "TransactionStatus",
    "TransactionStatusChangedPayload",
    "TransactionStatusSnapshot",
    "TransitionRequest",
    "transaction_number_seq",
]
