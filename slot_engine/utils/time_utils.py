"""Time helpers shared by the slot engine services."""

from datetime import date, datetime, time, timedelta
from typing import Iterator

import pytz

from slot_engine.errors import InputError

TIME_BUCKETS = (
    "early-morning",
    "morning",
    "early-afternoon",
    "afternoon",
    "late-afternoon",
)

TIME_BUCKET_NAMES = {
    "early-morning": "Early Morning (8-10 AM)",
    "morning": "Morning (10 AM-12 PM)",
    "early-afternoon": "Early Afternoon (12-2 PM)",
    "afternoon": "Afternoon (2-4 PM)",
    "late-afternoon": "Late Afternoon (4-6 PM)",
}

# Indexed by day of week with Sunday == 0
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def parse_time(value) -> time:
    """Parse an "HH:MM" string (or pass a time through)."""
    if isinstance(value, time):
        return value
    try:
        hour, minute = (int(part) for part in str(value).strip().split(":"))
        return time(hour, minute)
    except (TypeError, ValueError) as e:
        raise InputError(f"Invalid time of day {value!r}: expected HH:MM") from e


def time_bucket(hour: int) -> str:
    """Map a start hour to one of the five coarse buckets of the working day."""
    if hour < 10:
        return "early-morning"
    if hour < 12:
        return "morning"
    if hour < 14:
        return "early-afternoon"
    if hour < 16:
        return "afternoon"
    return "late-afternoon"


def day_of_week(moment: datetime) -> int:
    """Day of week with Sunday == 0 and Saturday == 6."""
    return (moment.weekday() + 1) % 7


def get_timezone(name: str):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as e:
        raise InputError(f"Unknown timezone {name!r}") from e


def to_local(moment: datetime, tz) -> datetime:
    """Express ``moment`` in ``tz``; naive datetimes are taken as already local."""
    if moment.tzinfo is None:
        return tz.localize(moment)
    return moment.astimezone(tz)


def as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise InputError(f"Invalid date {value!r}: expected YYYY-MM-DD") from e


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
