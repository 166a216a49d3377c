from __future__ import annotations
from datetime import datetime, UTC


def utcnow() -> datetime:
    """Текущее время в UTC без tzinfo: так оно хранится в БД."""
    return datetime.now(UTC).replace(tzinfo=None)


def as_utc_naive(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value
