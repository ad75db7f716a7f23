"""
Date and time helpers anchored to the application's reference timezone.

Standup dates are stored as ``YYYY-MM-DD`` strings, so lexical ordering of the
stored values equals chronological ordering.
"""
from datetime import date, datetime
from enum import Enum
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from ..config import settings

Clock = Callable[[], datetime]

DATE_FORMAT = "%Y-%m-%d"
FULL_DAY_START = "00:00"
FULL_DAY_END = "23:59"
MINUTES_PER_DAY = 24 * 60


class DateRelation(str, Enum):
    PAST = "past"
    TODAY = "today"
    FUTURE = "future"


def zone_clock(tz_name: Optional[str] = None) -> Clock:
    """Return a clock producing aware datetimes in the given zone."""
    zone = ZoneInfo(tz_name or settings.app_timezone)
    return lambda: datetime.now(zone)


def to_date_str(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def parse_date_str(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()


def classify_date(target: date, today: date) -> DateRelation:
    if target < today:
        return DateRelation.PAST
    if target > today:
        return DateRelation.FUTURE
    return DateRelation.TODAY


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def time_to_minutes(value: Optional[str]) -> Optional[int]:
    """Parse ``HH:MM`` into minutes after midnight; None when unparseable."""
    if not value:
        return None
    parts = value.split(":")
    if len(parts) != 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    return hours * 60 + minutes


def format_time_display(value: Optional[str]) -> str:
    """``13:05`` -> ``1:05 PM``"""
    minutes = time_to_minutes(value)
    if minutes is None:
        return ""
    hours, mins = divmod(minutes, 60)
    suffix = "AM" if hours < 12 else "PM"
    display_hour = hours % 12 or 12
    return f"{display_hour}:{mins:02d} {suffix}"


def day_off_window(start: Optional[str], end: Optional[str]) -> tuple:
    """Return the [start, end) window of a day off in minutes.

    A missing bound falls back to the full day; an end of 23:59 covers the
    last minute of the day.
    """
    start_minutes = time_to_minutes(start)
    end_minutes = time_to_minutes(end)
    if start_minutes is None:
        start_minutes = 0
    if end_minutes is None or end_minutes >= MINUTES_PER_DAY - 1:
        end_minutes = MINUTES_PER_DAY
    return start_minutes, end_minutes


def describe_day_off_range(start: Optional[str], end: Optional[str]) -> str:
    start = start or FULL_DAY_START
    end = end or FULL_DAY_END
    if start == FULL_DAY_START and end == FULL_DAY_END:
        return "all day"
    return f"{format_time_display(start)} – {format_time_display(end)}".strip()


def partial_day_kind(start: Optional[str], end: Optional[str]) -> Optional[str]:
    """Classify a day-off window as a late start, an early leave, or neither."""
    start_minutes, end_minutes = day_off_window(start, end)
    if start_minutes == 0 and end_minutes < MINUTES_PER_DAY:
        return "late start"
    if start_minutes > 0 and end_minutes == MINUTES_PER_DAY:
        return "leaving early"
    return None


def format_long_date(value: date) -> str:
    """``Monday, Oct 12``"""
    return f"{value:%A}, {value:%b} {value.day}"


def format_short_date(value: date) -> str:
    """``Oct 12``"""
    return f"{value:%b} {value.day}"


def humanize_upcoming_date(target: date, today: date) -> str:
    delta = (target - today).days
    if delta == 1:
        return "tomorrow"
    if 1 < delta < 7:
        return f"{target:%A}"
    return format_long_date(target)
