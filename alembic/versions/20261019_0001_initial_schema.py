"""Initial hubp2p schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _enum(*values: str, name: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, length=32)


_CHANNEL = ("user", "api")
_PAYMENT_METHOD = ("pix", "ted")


def upgrade() -> None:
    op.execute("CREATE SEQUENCE IF NOT EXISTS transaction_number_seq START 1")

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=128), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "admin_users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_admin_users_email"),
    )

    op.create_table(
        "admin_sessions",
        sa.Column("token_hash", sa.String(length=64), nullable=False),
        sa.Column("admin_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
        ),
        sa.ForeignKeyConstraint(["admin_id"], ["admin_users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("token_hash"),
    )
    op.create_index("ix_admin_sessions_admin_id", "admin_sessions", ["admin_id"])

    op.create_table(
        "payment_accounts",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("pool", _enum(*_CHANNEL, name="transactionchannel"), nullable=False),
        sa.Column("account_type", _enum(*_PAYMENT_METHOD, name="paymentmethod"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("pix_key", sa.String(length=255), nullable=True),
        sa.Column("pix_key_holder", sa.String(length=255), nullable=True),
        sa.Column("pix_qr_code", sa.Text(), nullable=True),
        sa.Column("bank_name", sa.String(length=128), nullable=True),
        sa.Column("bank_code", sa.String(length=16), nullable=True),
        sa.Column("account_holder", sa.String(length=255), nullable=True),
        sa.Column("account_agency", sa.String(length=16), nullable=True),
        sa.Column("account_number", sa.String(length=32), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # at most one active account per (pool, account_type)
    op.create_index(
        "uq_payment_accounts_active_per_pool",
        "payment_accounts",
        ["pool", "account_type"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "transactions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("transaction_number", sa.String(length=32), nullable=False),
        sa.Column("channel", _enum(*_CHANNEL, name="transactionchannel"), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=True),
        sa.Column("amount_brl", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("amount_usd", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("exchange_rate", sa.Numeric(precision=18, scale=6), nullable=False),
        sa.Column("crypto_amount", sa.Numeric(precision=28, scale=8), nullable=True),
        sa.Column(
            "crypto_network",
            _enum("bitcoin", "ethereum", "polygon", "bsc", "solana", "tron", name="cryptonetwork"),
            nullable=False,
        ),
        sa.Column("wallet_address", sa.String(length=255), nullable=False),
        sa.Column("payment_method", _enum(*_PAYMENT_METHOD, name="paymentmethod"), nullable=False),
        sa.Column("payment_account_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("pix_key", sa.String(length=255), nullable=True),
        sa.Column("pix_key_holder", sa.String(length=255), nullable=True),
        sa.Column("pix_qr_code", sa.Text(), nullable=True),
        sa.Column("bank_name", sa.String(length=128), nullable=True),
        sa.Column("bank_code", sa.String(length=16), nullable=True),
        sa.Column("bank_account_holder", sa.String(length=255), nullable=True),
        sa.Column("bank_account_agency", sa.String(length=16), nullable=True),
        sa.Column("bank_account_number", sa.String(length=32), nullable=True),
        sa.Column(
            "status",
            _enum(
                "pending_payment",
                "payment_received",
                "converting",
                "sent",
                "cancelled",
                "expired",
                name="transactionstatus",
            ),
            nullable=False,
            server_default="pending_payment",
        ),
        sa.Column("tx_hash", sa.String(length=255), nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("payment_confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("crypto_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("transaction_number", name="uq_transactions_transaction_number"),
    )
    op.create_index("ix_transactions_channel", "transactions", ["channel"])
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])
    op.create_index("ix_transactions_status", "transactions", ["status"])
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"])

    op.create_table(
        "kyc_verifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column(
            "status",
            _enum("pending", "in_review", "approved", "rejected", name="kycstatus"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("document_type", sa.String(length=32), nullable=True),
        sa.Column("document_number", sa.String(length=64), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("reviewed_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
        ),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_kyc_verifications_user_id", "kyc_verifications", ["user_id"])
    op.create_index("ix_kyc_verifications_status", "kyc_verifications", ["status"])

    op.create_table(
        "notification_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("transaction_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column(
            "type",
            _enum("pushover", "email", "sms", name="notificationtype"),
            nullable=False,
            server_default="pushover",
        ),
        sa.Column(
            "kind", _enum("new_transaction", "status_update", name="notificationkind"), nullable=False
        ),
        sa.Column("recipient", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "status", _enum("sent", "failed", "pending", name="notificationstatus"), nullable=False
        ),
        sa.Column("error_message", sa.String(length=512), nullable=True),
        sa.Column("provider_reference", sa.String(length=128), nullable=True),
        sa.Column(
            "sent_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notification_logs_transaction_id", "notification_logs", ["transaction_id"])
    op.create_index("ix_notification_logs_status", "notification_logs", ["status"])
    op.create_index("ix_notification_logs_sent_at", "notification_logs", ["sent_at"])

    op.create_table(
        "outbox_events",
        sa.Column("event_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("aggregate_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "event_type",
            _enum("NotificationRequested", "TransactionStatusChanged", name="eventtype"),
            nullable=False,
        ),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column(
            "status",
            _enum("PENDING", "SENT", "FAILED", name="outboxstatus"),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
        ),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "next_attempt_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("event_id"),
    )
    op.create_index("ix_outbox_events_aggregate_id", "outbox_events", ["aggregate_id"])
    op.create_index("ix_outbox_events_event_type", "outbox_events", ["event_type"])
    op.create_index("ix_outbox_events_status", "outbox_events", ["status"])
    op.create_index("ix_outbox_events_next_attempt_at", "outbox_events", ["next_attempt_at"])


def downgrade() -> None:
    op.drop_table("outbox_events")
    op.drop_table("notification_logs")
    op.drop_table("kyc_verifications")
    op.drop_table("transactions")
    op.drop_index("uq_payment_accounts_active_per_pool", table_name="payment_accounts")
    op.drop_table("payment_accounts")
    op.drop_table("admin_sessions")
    op.drop_table("admin_users")
    op.drop_table("profiles")
    op.execute("DROP SEQUENCE IF EXISTS transaction_number_seq")
