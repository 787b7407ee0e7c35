"""
Service Update Conflict Detection

Finds the appointments of a service that would collide with a neighbor on the
same staff member's day if the service's duration or buffers changed.
Advisory only: nothing is modified.
"""
import logging
from typing import Any, Dict, Hashable, List, Sequence, Tuple

from booking.scheduling.intervals import (
    Interval,
    booked_interval,
    collision_interval_at,
    intervals_overlap,
)
from booking.scheduling.types import BookedInterval, ServiceTiming, field_value

logger = logging.getLogger(__name__)

GroupKey = Tuple[Hashable, str]  # (staff_id, "YYYY-MM-DD")


def neighbor_span(appointment: Any, day: str) -> Interval:
    """
    Occupied span of an existing appointment under its own service timing.
    Falls back to the stored start/end when the service is not loaded.
    """
    service = field_value(appointment, "service")
    if service is not None:
        return collision_interval_at(field_value(appointment, "start_time"), day, ServiceTiming.coerce(service))
    return booked_interval(BookedInterval.coerce(appointment), day)


def find_service_update_conflicts(
        own_appointments: Sequence[Any],
        neighbors_by_key: Dict[GroupKey, Sequence[Any]],
        new_timing: ServiceTiming
) -> List[Any]:
    """
    Args:
        own_appointments: future active appointments of the edited service
        neighbors_by_key: every active appointment of the staff member on that
            day (all services), keyed by (staff_id, ISO date)
        new_timing: proposed duration and buffers

    Returns:
        list: the distinct own appointments whose recomputed span overlaps
        another appointment of the same staff member on the same day
    """
    conflicts = []
    seen = set()

    for own in own_appointments:
        own_id = field_value(own, "id")
        if own_id in seen:
            continue

        day = str(field_value(own, "appointment_date"))[:10]
        key = (field_value(own, "staff_id"), day)
        proposed = collision_interval_at(field_value(own, "start_time"), day, new_timing)

        for neighbor in neighbors_by_key.get(key, ()):
            if field_value(neighbor, "id") == own_id:
                continue
            if intervals_overlap(proposed, neighbor_span(neighbor, day)):
                logger.debug(f"Appointment {own_id} would overlap {field_value(neighbor, 'id')} on {day}")
                conflicts.append(own)
                seen.add(own_id)
                break

    return conflicts
