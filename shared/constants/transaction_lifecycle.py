from __future__ import annotations

from dataclasses import dataclass

from shared.contracts import TransactionStatus


@dataclass(frozen=True)
class StatusProfile:
    status: TransactionStatus
    label: str
    rank: int
    terminal: bool
    next_statuses: frozenset[TransactionStatus]


_EXITS = frozenset({TransactionStatus.CANCELLED})

_STATUS_PROFILES = {
    TransactionStatus.PENDING_PAYMENT: StatusProfile(
        status=TransactionStatus.PENDING_PAYMENT,
        label="Awaiting payment",
        rank=0,
        terminal=False,
        next_statuses=frozenset({TransactionStatus.PAYMENT_RECEIVED, TransactionStatus.EXPIRED})
        | _EXITS,
    ),
    TransactionStatus.PAYMENT_RECEIVED: StatusProfile(
        status=TransactionStatus.PAYMENT_RECEIVED,
        label="Payment received",
        rank=1,
        terminal=False,
        next_statuses=frozenset({TransactionStatus.CONVERTING, TransactionStatus.SENT}) | _EXITS,
    ),
    TransactionStatus.CONVERTING: StatusProfile(
        status=TransactionStatus.CONVERTING,
        label="Converting",
        rank=2,
        terminal=False,
        next_statuses=frozenset({TransactionStatus.SENT}) | _EXITS,
    ),
    TransactionStatus.SENT: StatusProfile(
        status=TransactionStatus.SENT,
        label="Crypto sent",
        rank=3,
        terminal=True,
        next_statuses=frozenset(),
    ),
    TransactionStatus.CANCELLED: StatusProfile(
        status=TransactionStatus.CANCELLED,
        label="Cancelled",
        rank=3,
        terminal=True,
        next_statuses=frozenset(),
    ),
    TransactionStatus.EXPIRED: StatusProfile(
        status=TransactionStatus.EXPIRED,
        label="Expired",
        rank=3,
        terminal=True,
        next_statuses=frozenset(),
    ),
}

INITIAL_STATUS = TransactionStatus.PENDING_PAYMENT
STATUSES_REQUIRING_TX_HASH = frozenset({TransactionStatus.SENT})
STATUSES_ALLOWED_AFTER_EXPIRY = frozenset({TransactionStatus.EXPIRED, TransactionStatus.CANCELLED})


def get_status_profile(status: TransactionStatus) -> StatusProfile:
    return _STATUS_PROFILES[status]


def is_terminal(status: TransactionStatus) -> bool:
    return get_status_profile(status).terminal


def allowed_next_statuses(status: TransactionStatus) -> frozenset[TransactionStatus]:
    return get_status_profile(status).next_statuses


def can_transition(current: TransactionStatus, target: TransactionStatus) -> bool:
    return target in allowed_next_statuses(current)


def status_label(status: TransactionStatus) -> str:
    return get_status_profile(status).label


def status_rank(status: TransactionStatus) -> int:
    return get_status_profile(status).rank


def non_terminal_statuses() -> tuple[TransactionStatus, ...]:
    return tuple(status for status, profile in _STATUS_PROFILES.items() if not profile.terminal)
