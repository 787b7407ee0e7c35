"""
Interval overlap primitive shared by slot generation, the day oracle and the
service update conflict checker.
"""
from dataclasses import dataclass
from datetime import datetime

from booking.scheduling.calendar_math import TimeValue, DateValue, add_minutes, parse_time_on_date
from booking.scheduling.types import ServiceTiming, BookedInterval


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime


def intervals_overlap(a: Interval, b: Interval) -> bool:
    """Strict overlap: intervals that only touch at an endpoint do not collide"""
    return a.start < b.end and a.end > b.start


def face_interval(face_start: datetime, timing: ServiceTiming) -> Interval:
    """Customer-visible span, buffers excluded"""
    return Interval(face_start, add_minutes(face_start, timing.duration))


def collision_interval(face_start: datetime, timing: ServiceTiming) -> Interval:
    """Span the staff member is occupied: face span widened by both buffers"""
    face = face_interval(face_start, timing)
    return Interval(
        add_minutes(face.start, -timing.buffer_before),
        add_minutes(face.end, timing.buffer_after),
    )


def collision_interval_at(start_time: TimeValue, day: DateValue, timing: ServiceTiming) -> Interval:
    return collision_interval(parse_time_on_date(start_time, day), timing)


def booked_interval(booked: BookedInterval, day: DateValue) -> Interval:
    """Stored [start_time, end_time] of an appointment on the given day"""
    return Interval(
        parse_time_on_date(booked.start_time, day),
        parse_time_on_date(booked.end_time, day),
    )
