# src/quillpost/db/time.py
"""Timestamp helpers for Quillpost's ``created_at``/``updated_at`` columns."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Column default for every Quillpost timestamp: the current time in UTC."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    SQLite drops the offset of ``DateTime(timezone=True)`` columns, so rows read
    back from it carry naive values that were written in UTC. Aware values from
    other backends are converted.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
