from __future__ import annotations

from datetime import datetime, timezone

from slotbook.core.errors import InvalidInput


def utcnow() -> datetime:
    """Aware UTC timestamp, the storage convention for every datetime column."""
    return datetime.now(timezone.utc)


def to_storage(value: datetime, field: str = "scheduled_at") -> datetime:
    """Normalize an aware instant to aware UTC for storage and comparison."""
    if not isinstance(value, datetime):
        raise InvalidInput(f"{field} must be a datetime")
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        raise InvalidInput(f"{field} must include a timezone offset")
    return value.astimezone(timezone.utc)


def from_storage(value: datetime | None) -> datetime | None:
    """Aware UTC view of a stored datetime.

    SQLite drops the offset on read, so naive values are taken as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
