"""
Timestamp helpers.

All timestamps are handled as timezone-aware UTC. SQLite hands back naive
datetimes for ``DateTime(timezone=True)`` columns; ``as_utc`` reads those as UTC.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Current time, timezone-aware UTC."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize a stored timestamp to aware UTC (naive values are taken as UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
