"""
Calendar arithmetic helpers.

Every time of day is anchored to a reference calendar date; nothing here rolls
over midnight.
"""
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Union

TimeValue = Union[str, time, datetime, timedelta]
DateValue = Union[str, date, datetime]


def to_time(value: TimeValue) -> time:
    """
    Convert the supported time representations to datetime.time.

    Args:
        value: "HH:mm", "HH:mm:ss" (a leading date portion is ignored),
            time, datetime, or timedelta since midnight

    Returns:
        datetime.time object

    Raises:
        ValueError: if the value cannot be read as a wall-clock time
    """
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        # timedelta represents time since midnight
        return (datetime.min + value).time()
    if isinstance(value, str):
        text = value.strip()
        if "T" in text:
            text = text.split("T", 1)[1]
        elif " " in text:
            text = text.rsplit(" ", 1)[1]

        parts = text.split(":")
        if len(parts) not in (2, 3):
            raise ValueError(f"Invalid time string: {value!r}")
        try:
            hour = int(parts[0])
            minute = int(parts[1])
            second = int(parts[2][:2]) if len(parts) == 3 else 0
        except ValueError:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(hour, minute, second)

    raise ValueError(f"Cannot convert {type(value)} to time")


def to_date(value: DateValue) -> date:
    """Read a calendar date from a date, datetime or "YYYY-MM-DD" string"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Cannot convert {type(value)} to date")


def iso_date(value: DateValue) -> str:
    """ISO date string (YYYY-MM-DD) for the given day"""
    return to_date(value).isoformat()


def parse_time_on_date(value: TimeValue, reference_date: DateValue) -> datetime:
    """Combine a wall-clock time with the calendar date of reference_date"""
    return datetime.combine(to_date(reference_date), to_time(value))


def add_minutes(instant: datetime, minutes: int) -> datetime:
    return instant + timedelta(minutes=minutes)


def is_before(a: datetime, b: datetime) -> bool:
    return a < b


def is_after(a: datetime, b: datetime) -> bool:
    return a > b


def format_hhmm(value: Union[datetime, time]) -> str:
    return value.strftime("%H:%M")


def js_day_of_week(value: DateValue) -> int:
    """Day of week as stored in weekly availability: 0=Sunday ... 6=Saturday"""
    return to_date(value).isoweekday() % 7


def time_options(
        min_time: Optional[TimeValue] = None,
        max_time: Optional[TimeValue] = None,
        step_minutes: int = 15
) -> List[str]:
    """
    Time picker options between two hours.

    Hours run from min_time's hour to max_time's hour inclusive and every hour
    is fully subdivided, so ("09:00", "11:00") yields 09:00 through 11:45.
    Without limits the whole day is covered (00:00 .. 23:45 at 15 minutes).
    """
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")

    start_hour = to_time(min_time).hour if min_time is not None else 0
    end_hour = to_time(max_time).hour if max_time is not None else 23

    options = []
    for hour in range(start_hour, end_hour + 1):
        for minute in range(0, 60, step_minutes):
            options.append(f"{hour:02d}:{minute:02d}")
    return options
