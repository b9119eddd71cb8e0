"""Time representation helpers.

Weekdays use the Sunday = 0 convention of the backend. Shift boundaries are
fixed-width 24-hour "HH:MM" strings, so lexical order is time order.
"""
import re
from datetime import date, datetime, time, tzinfo
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

from clinic_schedule import config
from clinic_schedule.errors import ScheduleValidationError

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

DAY_START = time(0, 0, 0)
DAY_END = time(23, 59, 59)

TimezoneLike = Union[tzinfo, str, None]


def day_label(day_of_week: int) -> str:
    """Display label for a weekday (0 = Sunday)."""
    return config.DAY_LABELS[validate_day(day_of_week)]


def validate_day(day_of_week: int) -> int:
    """Return the weekday unchanged, or raise if it is not an int in [0, 6]."""
    if isinstance(day_of_week, bool) or not isinstance(day_of_week, int):
        raise ScheduleValidationError(f"Day of week must be an integer, got {day_of_week!r}")
    if not 0 <= day_of_week <= 6:
        raise ScheduleValidationError(f"Day of week must be between 0 and 6, got {day_of_week}")
    return day_of_week


def parse_hhmm(value: str) -> str:
    """
    Validate a "HH:MM" time-of-day string.

    Args:
        value: Zero-padded 24-hour time, e.g. "08:00"

    Returns:
        The value unchanged

    Raises:
        ScheduleValidationError: If the value is not in HH:MM format
    """
    if not isinstance(value, str) or not HHMM_PATTERN.match(value):
        raise ScheduleValidationError(f"Invalid time {value!r}, expected HH:MM (24-hour)")
    return value


def is_valid_shift(start: str, end: str) -> bool:
    """True when both bounds are valid HH:MM and start is before end."""
    try:
        parse_hhmm(start)
        parse_hhmm(end)
    except ScheduleValidationError:
        return False
    return start < end


def js_weekday(day: date) -> int:
    """Convert Python's Monday = 0 weekday to the Sunday = 0 convention."""
    return (day.weekday() + 1) % 7


def resolve_timezone(tz: TimezoneLike = None) -> Optional[tzinfo]:
    """Turn a zone name into a ZoneInfo; None falls back to config, then system local."""
    if tz is None:
        tz = config.TIMEZONE
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def to_local(value: Union[str, datetime], tz: TimezoneLike = None) -> datetime:
    """
    Parse a timestamp and express it in the local zone.

    Accepts ISO-8601 strings (a trailing "Z" included) or datetimes. Naive
    values are taken to already be local wall-clock time.

    Raises:
        ValueError: If the string is not a valid ISO-8601 timestamp
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)

    zone = resolve_timezone(tz)
    if value.tzinfo is None:
        if zone is None:
            return value.astimezone()
        return value.replace(tzinfo=zone)
    if zone is None:
        return value.astimezone()
    return value.astimezone(zone)


def parse_date(value: Union[str, date]) -> date:
    """Accept a date or a "YYYY-MM-DD" string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ScheduleValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def day_window(day: Union[str, date], tz: TimezoneLike = None) -> Tuple[datetime, datetime]:
    """
    Local [00:00:00, 23:59:59] window of a calendar date.

    Args:
        day: Calendar date or "YYYY-MM-DD"
        tz: Zone name or tzinfo (default: configured or system local)

    Returns:
        (start, end) as aware datetimes
    """
    day = parse_date(day)
    start = to_local(datetime.combine(day, DAY_START), tz)
    end = to_local(datetime.combine(day, DAY_END), tz)
    return start, end
