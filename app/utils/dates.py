from datetime import date, datetime, timezone
from typing import Union


def make_aware(dt: datetime) -> datetime:
    """Ensure datetime is timezone-aware (UTC)"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def get_utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime"""
    return datetime.now(timezone.utc)


def get_utc_now_naive() -> datetime:
    """Current UTC time without tzinfo, comparable with stored timestamps."""
    return get_utc_now().replace(tzinfo=None)


def to_date(value: Union[date, datetime, str, None]) -> date:
    """
    Normalize a DATE() value coming back from the database.

    PostgreSQL hands back ``date`` objects while SQLite returns ISO strings.
    Anything else raises ValueError; callers must not skip such rows.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Cannot interpret {value!r} as a calendar date")
