from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from shared.constants import get_network_profile, status_label
from shared.contracts import (
    NotificationKind,
    PaymentMethod,
    ProfileORM,
    TransactionChannel,
    TransactionORM,
    TransactionStatus,
)
from shared.utils.formatting import format_brl, format_usd, mask_identifier
from shared.utils.time import ensure_aware


@dataclass(frozen=True)
class NotificationContent:
    title: str
    message: str


def _customer_line(transaction: TransactionORM, owner: ProfileORM | None) -> str:
    if transaction.channel == TransactionChannel.API:
        return "Cliente: API pública"
    if owner is None:
        return f"Cliente: {transaction.user_id}"
    name = owner.full_name or owner.id
    return f"Cliente: {name} ({owner.email})" if owner.email else f"Cliente: {name}"


def _payment_line(transaction: TransactionORM) -> str:
    if transaction.payment_method == PaymentMethod.PIX:
        return f"Pagamento: PIX para {mask_identifier(transaction.pix_key)}"
    bank = transaction.bank_name or "banco"
    return f"Pagamento: TED {bank} conta {mask_identifier(transaction.bank_account_number)}"


def format_notification(
    transaction: TransactionORM, owner: ProfileORM | None, kind: NotificationKind
) -> NotificationContent:
    network = get_network_profile(transaction.crypto_network)
    lines = [
        f"Valor: {format_brl(transaction.amount_brl)} ({format_usd(transaction.amount_usd)})",
        f"Cotação: {transaction.exchange_rate}",
        f"Rede: {network.label}",
        f"Carteira: {mask_identifier(transaction.wallet_address, visible=6)}",
        _payment_line(transaction),
        _customer_line(transaction, owner),
    ]
    if kind == NotificationKind.NEW_TRANSACTION:
        expires_at = ensure_aware(transaction.expires_at)
        lines.append(f"Expira em: {expires_at:%d/%m/%Y %H:%M} UTC")
        return NotificationContent(
            title=f"Nova transação {transaction.transaction_number}",
            message="\n".join(lines),
        )

    lines.insert(0, f"Status: {status_label(transaction.status)}")
    if transaction.status == TransactionStatus.SENT and transaction.tx_hash:
        lines.append(f"Hash: {mask_identifier(transaction.tx_hash, visible=8)}")
    return NotificationContent(
        title=f"Transação {transaction.transaction_number} atualizada",
        message="\n".join(lines),
    )


def format_missing_transaction(transaction_id: UUID) -> NotificationContent:
    return NotificationContent(
        title="Transação não encontrada",
        message=f"Transaction {transaction_id} was not found when dispatching a notification",
    )
