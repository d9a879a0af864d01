from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.contracts.enums import (
    CryptoNetwork,
    KycStatus,
    NotificationKind,
    NotificationStatus,
    NotificationType,
    PaymentMethod,
    RateSource,
    TransactionChannel,
    TransactionStatus,
)


def _strip_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class QuoteResponse(BaseModel):
    amount_brl: Decimal
    amount_usd: Decimal
    base_rate: Decimal
    final_rate: Decimal
    display_rate: Decimal
    crypto_network: CryptoNetwork
    crypto_amount: Decimal
    crypto_symbol: str
    stale: bool
    source: RateSource
    quoted_at: datetime
    refresh_after_seconds: int


class CreateApiTransactionRequest(BaseModel):
    amount_brl: Decimal = Field(gt=0, decimal_places=2)
    crypto_network: CryptoNetwork
    wallet_address: str = Field(min_length=1, max_length=255)

    @field_validator("wallet_address")
    @classmethod
    def strip_wallet_address(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("wallet_address must not be blank")
        return stripped


class CreateUserTransactionRequest(CreateApiTransactionRequest):
    payment_method: PaymentMethod


class TransitionRequest(BaseModel):
    status: TransactionStatus
    tx_hash: str | None = Field(default=None, max_length=255)
    admin_notes: str | None = Field(default=None, max_length=4000)
    crypto_amount: Decimal | None = Field(default=None, ge=0)

    @field_validator("tx_hash")
    @classmethod
    def normalize_tx_hash(cls, value: str | None) -> str | None:
        return _strip_or_none(value)


class AdminNotesRequest(BaseModel):
    admin_notes: str = Field(max_length=4000)


class PaymentInstructions(BaseModel):
    payment_method: PaymentMethod
    pix_key: str | None = None
    pix_key_holder: str | None = None
    pix_qr_code: str | None = None
    bank_name: str | None = None
    bank_code: str | None = None
    bank_account_holder: str | None = None
    bank_account_agency: str | None = None
    bank_account_number: str | None = None


class TransactionResponse(BaseModel):
    id: UUID
    transaction_number: str
    channel: TransactionChannel
    user_id: str | None = None
    amount_brl: Decimal
    amount_usd: Decimal
    exchange_rate: Decimal
    crypto_amount: Decimal | None = None
    crypto_network: CryptoNetwork
    wallet_address: str
    payment: PaymentInstructions
    status: TransactionStatus
    tx_hash: str | None = None
    created_at: datetime
    expires_at: datetime
    payment_confirmed_at: datetime | None = None
    crypto_sent_at: datetime | None = None
    updated_at: datetime
    seconds_remaining: int
    version: int


class AdminTransactionResponse(TransactionResponse):
    admin_notes: str | None = None
    owner_full_name: str | None = None
    owner_email: str | None = None


class TransactionStatusSnapshot(BaseModel):
    id: UUID
    transaction_number: str
    status: TransactionStatus
    updated_at: datetime
    expires_at: datetime
    seconds_remaining: int
    version: int


class TransactionPage(BaseModel):
    items: list[AdminTransactionResponse]
    total: int
    limit: int
    offset: int


class CreatePaymentAccountRequest(BaseModel):
    pool: TransactionChannel = TransactionChannel.USER
    account_type: PaymentMethod
    pix_key: str | None = Field(default=None, max_length=255)
    pix_key_holder: str | None = Field(default=None, max_length=255)
    pix_qr_code: str | None = None
    bank_name: str | None = Field(default=None, max_length=128)
    bank_code: str | None = Field(default=None, max_length=16)
    account_holder: str | None = Field(default=None, max_length=255)
    account_agency: str | None = Field(default=None, max_length=16)
    account_number: str | None = Field(default=None, max_length=32)

    @field_validator(
        "pix_key",
        "pix_key_holder",
        "pix_qr_code",
        "bank_name",
        "bank_code",
        "account_holder",
        "account_agency",
        "account_number",
    )
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        return _strip_or_none(value)


class PaymentAccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    pool: TransactionChannel
    account_type: PaymentMethod
    is_active: bool
    pix_key: str | None = None
    pix_key_holder: str | None = None
    pix_qr_code: str | None = None
    bank_name: str | None = None
    bank_code: str | None = None
    account_holder: str | None = None
    account_agency: str | None = None
    account_number: str | None = None
    created_at: datetime


class ActivePixInstructions(BaseModel):
    pix_key: str
    pix_key_holder: str | None = None
    pix_qr_code: str | None = None


class ActiveTedInstructions(BaseModel):
    bank_name: str | None = None
    bank_code: str | None = None
    account_holder: str | None = None
    account_agency: str | None = None
    account_number: str | None = None


class ActivePaymentAccountsResponse(BaseModel):
    pix: ActivePixInstructions | None = None
    ted: ActiveTedInstructions | None = None


class KycSubmissionRequest(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    document_type: str = Field(min_length=1, max_length=32)
    document_number: str = Field(min_length=1, max_length=64)
    birth_date: date | None = None


class KycRejectRequest(BaseModel):
    reason: str = Field(max_length=2000)


class KycVerificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    status: KycStatus
    full_name: str | None = None
    document_type: str | None = None
    document_number: str | None = None
    birth_date: date | None = None
    rejection_reason: str | None = None
    verified_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class NotificationLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    transaction_id: UUID | None = None
    type: NotificationType
    kind: NotificationKind
    recipient: str
    title: str | None = None
    message: str
    status: NotificationStatus
    error_message: str | None = None
    provider_reference: str | None = None
    sent_at: datetime


class NotificationEnqueuedResponse(BaseModel):
    transaction_id: UUID
    kind: NotificationKind
    event_id: UUID


class DailyVolume(BaseModel):
    date: date
    count: int
    value: Decimal


class DashboardStatsResponse(BaseModel):
    today_count: int
    today_total_brl: Decimal
    pending_count: int
    sent_today_count: int
    chart: list[DailyVolume]
