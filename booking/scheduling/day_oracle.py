"""
Day Availability Oracle

Answers "is at least one slot free on this day" without enumerating the whole
day, and paints Available/Busy/Unavailable over a rolling range of dates.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterable, Optional

from booking.config.context import get_context
from booking.schemas.scheduling import DayStatus
from booking.scheduling.calendar_math import DateValue, iso_date, js_day_of_week, to_date
from booking.scheduling.slot_generator import (
    iter_candidate_slots,
    minimum_booking_time_from,
    prepare_inputs,
)
from booking.scheduling.types import AvailabilityWindow, BlockedRange, BookedInterval

logger = logging.getLogger(__name__)

DayStatusFallback = Callable[[date, Exception], DayStatus]


def check_availability(
        service: Any,
        availability_windows: Iterable[Any],
        existing_appointments: Optional[Iterable[Any]],
        target_date: date,
        now: Optional[datetime] = None,
        lead_time_minutes: Optional[int] = None,
        max_iterations: Optional[int] = None
) -> bool:
    """
    True as soon as one free slot exists in any window.

    Same inputs and stepping as generate_slots. A non-positive cycle counts as
    unavailable instead of aborting.
    """
    timing, windows, appointments = prepare_inputs(service, availability_windows, existing_appointments)

    if timing.cycle <= 0:
        logger.warning(f"Invalid service cycle ({timing.cycle} min), treating {target_date} as unavailable")
        return False

    if max_iterations is None:
        max_iterations = get_context().settings.MAX_SLOT_ITERATIONS

    minimum_booking_time = minimum_booking_time_from(now, lead_time_minutes)

    for candidate in iter_candidate_slots(
            timing, windows, appointments, target_date, minimum_booking_time, max_iterations
    ):
        if candidate.available:
            return True
    return False


def assume_available_on_error(day: date, exc: Exception) -> DayStatus:
    """Fail-open policy: a day whose status cannot be computed stays selectable"""
    logger.warning(f"Could not resolve day status for {day.isoformat()}, assuming available: {exc}")
    return DayStatus.AVAILABLE


def resolve_day_status(
        day: DateValue,
        service: Any,
        weekly_availability: Iterable[Any],
        blocked_dates: Iterable[Any],
        appointments: Iterable[Any],
        now: Optional[datetime] = None,
        lead_time_minutes: Optional[int] = None
) -> DayStatus:
    """
    Classify one calendar date.

    Args:
        day: the date to classify
        service: service being booked
        weekly_availability: all weekly rows of the staff member
        blocked_dates: the staff member's blocked ranges
        appointments: active appointments, any dates (filtered to day here)

    Returns:
        DayStatus: Unavailable without an available weekly row for the
        weekday or inside a blocked range, else Available/Busy
    """
    target = to_date(day)
    day_iso = iso_date(target)
    weekday = js_day_of_week(target)

    windows = [
        window for window in (AvailabilityWindow.coerce(row) for row in weekly_availability)
        if window.day_of_week == weekday and window.is_available
    ]
    if not windows:
        return DayStatus.UNAVAILABLE

    if any(BlockedRange.coerce(block).contains(day_iso) for block in blocked_dates):
        return DayStatus.UNAVAILABLE

    day_appointments = [
        appt for appt in (BookedInterval.coerce(a) for a in appointments)
        if appt.appointment_date in (None, day_iso)
    ]

    if check_availability(service, windows, day_appointments, target, now=now, lead_time_minutes=lead_time_minutes):
        return DayStatus.AVAILABLE
    return DayStatus.BUSY


def build_day_status_map(
        start_date: DateValue,
        days: int,
        service: Any,
        weekly_availability: Iterable[Any],
        blocked_dates: Iterable[Any],
        appointments: Iterable[Any],
        now: Optional[datetime] = None,
        lead_time_minutes: Optional[int] = None,
        on_error: DayStatusFallback = assume_available_on_error
) -> Dict[str, DayStatus]:
    """
    Day statuses for `days` consecutive dates starting at start_date.

    The clock is read once so every date is judged against the same instant.
    A failure on one date is handed to on_error and does not stop the others.
    """
    if now is None:
        now = get_context().now()

    weekly_availability = list(weekly_availability or [])
    blocked_dates = list(blocked_dates or [])
    appointments = list(appointments or [])

    first_day = to_date(start_date)
    statuses = {}

    for offset in range(days):
        day = first_day + timedelta(days=offset)
        try:
            status = resolve_day_status(
                day,
                service,
                weekly_availability,
                blocked_dates,
                appointments,
                now=now,
                lead_time_minutes=lead_time_minutes,
            )
        except Exception as e:
            status = on_error(day, e)
        statuses[day.isoformat()] = status

    return statuses


def next_available_date(statuses: Dict[str, DayStatus]) -> Optional[date]:
    """First date marked Available, in calendar order"""
    for day_iso in sorted(statuses):
        if statuses[day_iso] == DayStatus.AVAILABLE:
            return to_date(day_iso)
    return None
