"""
Wall-clock datetime utilities.

Plan times are naive datetimes in the user's local wall clock. These helpers
convert incoming values to that representation and do the small amount of
minute arithmetic the planner needs.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo


def now_local(user_timezone: str) -> datetime:
    """
    Get the current wall-clock time in the user's timezone, without tzinfo.

    Args:
        user_timezone: IANA timezone name (e.g., "Europe/London")

    Returns:
        datetime: Naive local datetime
    """
    return datetime.now(ZoneInfo(user_timezone)).replace(tzinfo=None)


def to_local_naive(dt: Optional[datetime], user_timezone: str) -> Optional[datetime]:
    """
    Convert a datetime to the user's naive wall-clock time.

    Naive datetimes are assumed to already be local and are returned unchanged.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(ZoneInfo(user_timezone)).replace(tzinfo=None)


def at_clock(base: datetime, clock: str) -> datetime:
    """
    Return ``base`` with its time of day replaced by an "HH:MM" string.

    Example:
        >>> at_clock(datetime(2025, 1, 30, 7, 12), "09:30")
        datetime(2025, 1, 30, 9, 30)
    """
    hours, minutes = (int(part) for part in clock.split(":"))
    return base.replace(hour=hours, minute=minutes, second=0, microsecond=0)


def add_minutes(dt: datetime, minutes: int) -> datetime:
    return dt + timedelta(minutes=minutes)


def minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


def round_up_to_step(dt: datetime, step_minutes: int = 5) -> datetime:
    """
    Round up to the next ``step_minutes`` boundary, dropping seconds.

    A value exactly on a boundary is returned unchanged.
    """
    rounded = dt.replace(second=0, microsecond=0)
    if rounded != dt:
        rounded += timedelta(minutes=1)
    remainder = rounded.minute % step_minutes
    if remainder:
        rounded += timedelta(minutes=step_minutes - remainder)
    return rounded


def day_bounds(plan_date: date) -> tuple[datetime, datetime]:
    """First and last instant of a calendar day."""
    return datetime.combine(plan_date, time.min), datetime.combine(plan_date, time.max)
