from __future__ import annotations

from datetime import datetime

from shared.contracts import (
    AdminTransactionResponse,
    PaymentInstructions,
    ProfileORM,
    TransactionORM,
    TransactionResponse,
    TransactionStatus,
    TransactionStatusSnapshot,
)
from shared.utils.time import seconds_until


def seconds_remaining(transaction: TransactionORM, now: datetime) -> int:
    if transaction.status != TransactionStatus.PENDING_PAYMENT:
        return 0
    return seconds_until(transaction.expires_at, now=now)


def payment_instructions(transaction: TransactionORM) -> PaymentInstructions:
    return PaymentInstructions(
        payment_method=transaction.payment_method,
        pix_key=transaction.pix_key,
        pix_key_holder=transaction.pix_key_holder,
        pix_qr_code=transaction.pix_qr_code,
        bank_name=transaction.bank_name,
        bank_code=transaction.bank_code,
        bank_account_holder=transaction.bank_account_holder,
        bank_account_agency=transaction.bank_account_agency,
        bank_account_number=transaction.bank_account_number,
    )


def _base_fields(transaction: TransactionORM, now: datetime) -> dict:
    return {
        "id": transaction.id,
        "transaction_number": transaction.transaction_number,
        "channel": transaction.channel,
        "user_id": transaction.user_id,
        "amount_brl": transaction.amount_brl,
        "amount_usd": transaction.amount_usd,
        "exchange_rate": transaction.exchange_rate,
        "crypto_amount": transaction.crypto_amount,
        "crypto_network": transaction.crypto_network,
        "wallet_address": transaction.wallet_address,
        "payment": payment_instructions(transaction),
        "status": transaction.status,
        "tx_hash": transaction.tx_hash,
        "created_at": transaction.created_at,
        "expires_at": transaction.expires_at,
        "payment_confirmed_at": transaction.payment_confirmed_at,
        "crypto_sent_at": transaction.crypto_sent_at,
        "updated_at": transaction.updated_at,
        "seconds_remaining": seconds_remaining(transaction, now),
        "version": transaction.version,
    }


def to_transaction_response(transaction: TransactionORM, now: datetime) -> TransactionResponse:
    return TransactionResponse(**_base_fields(transaction, now))


def to_admin_response(
    transaction: TransactionORM, owner: ProfileORM | None, now: datetime
) -> AdminTransactionResponse:
    return AdminTransactionResponse(
        **_base_fields(transaction, now),
        admin_notes=transaction.admin_notes,
        owner_full_name=owner.full_name if owner else None,
        owner_email=owner.email if owner else None,
    )


def to_status_snapshot(transaction: TransactionORM, now: datetime) -> TransactionStatusSnapshot:
    return TransactionStatusSnapshot(
        id=transaction.id,
        transaction_number=transaction.transaction_number,
        status=transaction.status,
        updated_at=transaction.updated_at,
        expires_at=transaction.expires_at,
        seconds_remaining=seconds_remaining(transaction, now),
        version=transaction.version,
    )
