"""Datetime utilities for timezone-aware timestamps and local day buckets.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)

All timestamps are stored in UTC. Day buckets (attendance ``date``) are the
calendar day in the gym's configured ``TIMEZONE``.
"""

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from libs.common.config import get_settings

SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    This replaces the deprecated datetime.utcnow() which returns naive datetimes.
    Always use this for timestamps in the database.
    """
    return datetime.now(timezone.utc)


def local_tz() -> ZoneInfo:
    return ZoneInfo(get_settings().TIMEZONE)


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def local_date(dt: Optional[datetime] = None) -> date:
    """Calendar day of ``dt`` (default now) in the gym's timezone."""
    dt = ensure_aware(dt or utc_now())
    return dt.astimezone(local_tz()).date()


def local_day_end(dt: Optional[datetime] = None) -> datetime:
    """23:59:59.999 local time on the day of ``dt``, as a UTC datetime."""
    day = local_date(dt)
    end = datetime.combine(day, time(23, 59, 59, 999000), tzinfo=local_tz())
    return end.astimezone(timezone.utc)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end``, rounded half-up, never negative."""
    seconds = (ensure_aware(end) - ensure_aware(start)).total_seconds()
    return max(0, math.floor(seconds / 60 + 0.5))


def days_until(end: datetime, now: Optional[datetime] = None) -> int:
    """ceil((end - now) / 1 day); negative once ``end`` has passed."""
    now = ensure_aware(now or utc_now())
    seconds = (ensure_aware(end) - now).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY)


def add_months(start: datetime, months: int) -> datetime:
    """Calendar-month addition; the day is clamped to the target month's end."""
    return start + relativedelta(months=months)


def parse_day(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` query value."""
    return date.fromisoformat(value)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """UTC [start, end) datetimes covering local calendar ``day``."""
    tz = local_tz()
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
