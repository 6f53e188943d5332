"""Timestamp helpers.

All domain timestamps are timezone-aware UTC datetimes. Naive input is
assumed to already be UTC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def parse_datetime(value: datetime | str) -> datetime:
    """Coerce a datetime or ISO-8601 string into an aware datetime.

    Raises:
        ValueError: If the value cannot be interpreted as a datetime.
    """
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, str):
        return ensure_aware(datetime.fromisoformat(value.strip()))
    raise ValueError(f"Unsupported datetime value: {value!r}")
