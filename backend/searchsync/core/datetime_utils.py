"""Datetime helpers."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_duration(started_at: datetime, completed_at: datetime) -> str:
    """Format the elapsed time between two datetimes as seconds, e.g. ``"3.2s"``."""
    seconds = max((completed_at - started_at).total_seconds(), 0.0)
    return f"{seconds:.1f}s"
