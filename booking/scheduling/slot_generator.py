"""
Slot Generation

Enumerates the bookable start times of one service with one staff member on
one day, considering:
- Service duration and buffers (the cycle)
- Weekly availability windows for that day
- Minimum booking notice
- Existing appointments
"""
import logging
from dataclasses import dataclass
from datetime import datetime, date
from typing import Any, Iterable, Iterator, List, Optional, Sequence

from booking.config.context import get_context
from booking.schemas.scheduling import TimeSlot
from booking.scheduling.calendar_math import (
    add_minutes,
    format_hhmm,
    is_after,
    is_before,
    parse_time_on_date,
)
from booking.scheduling.intervals import (
    booked_interval,
    collision_interval,
    face_interval,
    intervals_overlap,
)
from booking.scheduling.types import AvailabilityWindow, BookedInterval, ServiceTiming

logger = logging.getLogger(__name__)

REASON_TOO_SOON = "Too soon"
REASON_ALREADY_BOOKED = "Already booked"


@dataclass(frozen=True)
class CandidateSlot:
    face_start: datetime
    available: bool
    reason: Optional[str] = None

    def to_time_slot(self) -> TimeSlot:
        return TimeSlot(
            time=format_hhmm(self.face_start),
            available=self.available,
            reason=self.reason,
        )


def iter_candidate_slots(
        timing: ServiceTiming,
        windows: Sequence[AvailabilityWindow],
        appointments: Sequence[BookedInterval],
        target_date: date,
        minimum_booking_time: datetime,
        max_iterations: int
) -> Iterator[CandidateSlot]:
    """
    Step through every window and yield each candidate slot with its verdict.

    Windows are scanned in the order given, chronologically within a window.
    Callers must reject a non-positive cycle first; it yields nothing here.
    """
    cycle = timing.cycle
    if cycle <= 0:
        return

    booked = [booked_interval(appt, target_date) for appt in appointments]

    for window in windows:
        schedule_start = parse_time_on_date(window.start_time, target_date)
        schedule_end = parse_time_on_date(window.end_time, target_date)

        current_slot = schedule_start
        iterations = 0

        while True:
            iterations += 1
            if iterations > max_iterations:
                logger.error(
                    f"Slot loop exceeded {max_iterations} iterations for window "
                    f"{window.start_time}-{window.end_time} on {target_date}, stopping"
                )
                break

            face = face_interval(current_slot, timing)
            total_end = add_minutes(face.end, timing.buffer_after)

            if is_after(total_end, schedule_end):
                break

            collision = collision_interval(current_slot, timing)

            reason = None
            # Covers both "later today but too close" and past dates
            if is_before(face.start, minimum_booking_time):
                reason = REASON_TOO_SOON
            elif any(intervals_overlap(collision, span) for span in booked):
                reason = REASON_ALREADY_BOOKED

            yield CandidateSlot(face_start=face.start, available=reason is None, reason=reason)

            current_slot = add_minutes(current_slot, cycle)


def minimum_booking_time_from(now: Optional[datetime], lead_time_minutes: Optional[int]) -> datetime:
    """Earliest bookable start: now plus the configured lead time"""
    context = get_context()
    if now is None:
        now = context.now()
    if lead_time_minutes is None:
        lead_time_minutes = context.settings.MIN_LEAD_TIME_MINUTES
    return add_minutes(now, lead_time_minutes)


def prepare_inputs(
        service: Any,
        availability_windows: Iterable[Any],
        existing_appointments: Optional[Iterable[Any]]
):
    timing = ServiceTiming.coerce(service)
    windows = [AvailabilityWindow.coerce(w) for w in availability_windows]
    appointments = [BookedInterval.coerce(a) for a in (existing_appointments or [])]
    return timing, windows, appointments


def generate_slots(
        service: Any,
        availability_windows: Iterable[Any],
        existing_appointments: Optional[Iterable[Any]],
        target_date: date,
        now: Optional[datetime] = None,
        lead_time_minutes: Optional[int] = None,
        max_iterations: Optional[int] = None
) -> List[TimeSlot]:
    """
    Generate the candidate slots of a day, available or not.

    Args:
        service: anything with duration, buffer_before and buffer_after
        availability_windows: windows for target_date's weekday, already
            filtered to is_available
        existing_appointments: that day's active appointments
        target_date: day the slots are anchored to
        now: current time; read from the application clock when omitted
        lead_time_minutes: minimum notice, defaults to settings
        max_iterations: per-window loop ceiling, defaults to settings

    Returns:
        list[TimeSlot]: one entry per candidate start, unavailable ones
        included with their reason. Empty when the service cycle is not
        positive.
    """
    timing, windows, appointments = prepare_inputs(service, availability_windows, existing_appointments)

    if timing.cycle <= 0:
        logger.error(
            f"Invalid service cycle ({timing.cycle} min) for duration={timing.duration}, "
            f"buffer_before={timing.buffer_before}, buffer_after={timing.buffer_after}; "
            f"returning no slots"
        )
        return []

    if max_iterations is None:
        max_iterations = get_context().settings.MAX_SLOT_ITERATIONS

    minimum_booking_time = minimum_booking_time_from(now, lead_time_minutes)

    return [
        candidate.to_time_slot()
        for candidate in iter_candidate_slots(
            timing, windows, appointments, target_date, minimum_booking_time, max_iterations
        )
    ]
