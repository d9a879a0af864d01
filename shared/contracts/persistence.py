from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Sequence,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from shared.contracts.enums import (
    CryptoNetwork,
    EventType,
    KycStatus,
    NotificationKind,
    NotificationStatus,
    NotificationType,
    OutboxStatus,
    PaymentMethod,
    TransactionChannel,
    TransactionStatus,
)


class Base(DeclarativeBase):
    pass


def _enum_values(enum_cls: type[PyEnum]) -> list[str]:
    return [member.value for member in enum_cls]


def _enum_column(enum_cls: type[PyEnum]) -> Enum:
    return Enum(enum_cls, native_enum=False, values_callable=_enum_values, length=32)


_JSON_PAYLOAD = JSON().with_variant(JSONB(), "postgresql")

transaction_number_seq = Sequence("transaction_number_seq", metadata=Base.metadata)


class ProfileORM(Base):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class AdminUserORM(Base):
    __tablename__ = "admin_users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class AdminSessionORM(Base):
    __tablename__ = "admin_sessions"

    token_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    admin_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("admin_users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class PaymentAccountORM(Base):
    __tablename__ = "payment_accounts"
    __table_args__ = (
        Index(
            "uq_payment_accounts_active_per_pool",
            "pool",
            "account_type",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    pool: Mapped[TransactionChannel] = mapped_column(
        _enum_column(TransactionChannel), nullable=False, default=TransactionChannel.USER
    )
    account_type: Mapped[PaymentMethod] = mapped_column(_enum_column(PaymentMethod), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    pix_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pix_key_holder: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pix_qr_code: Mapped[str | None] = mapped_column(Text, nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    bank_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    account_holder: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account_agency: Mapped[str | None] = mapped_column(String(16), nullable=True)
    account_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class TransactionORM(Base):
    __tablename__ = "transactions"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    transaction_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    channel: Mapped[TransactionChannel] = mapped_column(
        _enum_column(TransactionChannel), nullable=False, index=True
    )
    user_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("profiles.id"), nullable=True, index=True
    )
    amount_brl: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    amount_usd: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    exchange_rate: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    crypto_amount: Mapped[Decimal | None] = mapped_column(Numeric(28, 8), nullable=True)
    crypto_network: Mapped[CryptoNetwork] = mapped_column(
        _enum_column(CryptoNetwork), nullable=False
    )
    wallet_address: Mapped[str] = mapped_column(String(255), nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        _enum_column(PaymentMethod), nullable=False
    )
    payment_account_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    pix_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pix_key_holder: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pix_qr_code: Mapped[str | None] = mapped_column(Text, nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    bank_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    bank_account_holder: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bank_account_agency: Mapped[str | None] = mapped_column(String(16), nullable=True)
    bank_account_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[TransactionStatus] = mapped_column(
        _enum_column(TransactionStatus),
        nullable=False,
        default=TransactionStatus.PENDING_PAYMENT,
        index=True,
    )
    tx_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    payment_confirmed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    crypto_sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class KycVerificationORM(Base):
    __tablename__ = "kyc_verifications"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("profiles.id"), nullable=False, index=True
    )
    status: Mapped[KycStatus] = mapped_column(
        _enum_column(KycStatus), nullable=False, default=KycStatus.PENDING, index=True
    )
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    document_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    document_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class NotificationLogORM(Base):
    __tablename__ = "notification_logs"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    transaction_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    type: Mapped[NotificationType] = mapped_column(
        _enum_column(NotificationType), nullable=False, default=NotificationType.PUSHOVER
    )
    kind: Mapped[NotificationKind] = mapped_column(_enum_column(NotificationKind), nullable=False)
    recipient: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[NotificationStatus] = mapped_column(
        _enum_column(NotificationStatus), nullable=False, index=True
    )
    error_message: Mapped[str | None] = mapped_column(String(512), nullable=True)
    provider_reference: Mapped[str | None] = mapped_column(String(128), nullable=True)
    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC), index=True
    )


class OutboxEventORM(Base):
    __tablename__ = "outbox_events"

    event_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    aggregate_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    event_type: Mapped[EventType] = mapped_column(
        _enum_column(EventType), nullable=False, index=True
    )
    payload: Mapped[dict[str, Any]] = mapped_column(_JSON_PAYLOAD, nullable=False)
    status: Mapped[OutboxStatus] = mapped_column(
        _enum_column(OutboxStatus),
        nullable=False,
        default=OutboxStatus.PENDING,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_attempt_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC), index=True
    )
