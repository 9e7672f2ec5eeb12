"""
Timezone utilities for calendar-day bucketing.

All timestamps are stored in UTC. Anything that talks about "today" or a
game's date uses the US-Eastern calendar day, since that is how the MLB
schedule is published.

Eastern Time Zones:
- EST (Eastern Standard Time): UTC-5, November - March
- EDT (Eastern Daylight Time): UTC-4, March - November
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

EASTERN = ZoneInfo("America/New_York")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (patched in tests)."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Naive values are treated as UTC, which is how SQLite hands back
    timestamps written by this application.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_eastern(value: datetime) -> datetime:
    """Convert a UTC (or naive-UTC) datetime to US-Eastern."""
    return ensure_utc(value).astimezone(EASTERN)


def eastern_date(value: datetime) -> date:
    """
    Calendar day of a timestamp in US-Eastern time.

    Example:
        >>> eastern_date(datetime(2025, 7, 16, 2, 0, tzinfo=timezone.utc))
        datetime.date(2025, 7, 15)  # 10 PM EDT the previous evening
    """
    return to_eastern(value).date()


def eastern_today(now: Optional[datetime] = None) -> date:
    """Current US-Eastern calendar date."""
    return eastern_date(now or utc_now())


def eastern_midnight_utc(day: date) -> datetime:
    """UTC instant at which ``day`` begins in US-Eastern time (DST aware)."""
    return datetime.combine(day, time.min, tzinfo=EASTERN).astimezone(timezone.utc)


def eastern_day_bounds(day: Optional[date] = None, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Half-open UTC range ``[start, end)`` covering one US-Eastern day.

    Args:
        day: Eastern calendar date (defaults to today in ET)
        now: Reference time used when ``day`` is omitted

    Returns:
        (start_utc, end_utc); the range is 23 or 25 hours on DST change days
    """
    if day is None:
        day = eastern_today(now)
    return eastern_midnight_utc(day), eastern_midnight_utc(day + timedelta(days=1))


def minutes_since_eastern_midnight(now: Optional[datetime] = None) -> int:
    """Whole minutes elapsed since the most recent midnight in US-Eastern time."""
    local = to_eastern(now or utc_now())
    return local.hour * 60 + local.minute
