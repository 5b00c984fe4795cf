"""Datetime helpers shared by the resolver, freshness evaluator and store."""

from datetime import datetime, timezone


def now_local() -> datetime:
    """Current wall-clock time as a timezone-aware local datetime."""
    return datetime.now().astimezone()


def ensure_aware(value: datetime) -> datetime:
    """Attach the local timezone to naive values, leave aware ones unchanged."""
    if value.tzinfo is None:
        return value.astimezone()
    return value


def to_local(value: datetime) -> datetime:
    """Convert a datetime to aware local time.

    Naive datetimes are interpreted as local time already.
    """
    return value.astimezone()


def to_utc(value: datetime) -> datetime:
    """Convert a datetime to aware UTC (naive values are treated as local)."""
    return to_local(value).astimezone(timezone.utc)


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as written by the episode store.

    A trailing ``Z`` is accepted for compatibility with rows written by
    other tools.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
