from __future__ import annotations

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def seconds_until(deadline: datetime, *, now: datetime | None = None) -> int:
    reference = now or utc_now()
    remaining = (ensure_aware(deadline) - ensure_aware(reference)).total_seconds()
    return max(0, int(remaining))


def start_of_day(value: datetime) -> datetime:
    aware = ensure_aware(value)
    return aware.replace(hour=0, minute=0, second=0, microsecond=0)


def days_back(value: datetime, days: int) -> datetime:
    return start_of_day(value) - timedelta(days=days)
