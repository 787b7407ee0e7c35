"""
Value objects consumed by the scheduling core.

Each one can be built from an ORM row, a plain mapping, or an instance of
itself via coerce(), so callers hand over whatever they fetched.
"""
from dataclasses import dataclass
from typing import Any, Optional

from booking.scheduling.calendar_math import TimeValue, iso_date


def field_value(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


@dataclass(frozen=True)
class ServiceTiming:
    """Duration and buffers of a service, in minutes"""
    duration: int
    buffer_before: int = 0
    buffer_after: int = 0

    @property
    def cycle(self) -> int:
        return self.duration + self.buffer_before + self.buffer_after

    @classmethod
    def coerce(cls, obj: Any) -> "ServiceTiming":
        if isinstance(obj, cls):
            return obj
        return cls(
            duration=int(field_value(obj, "duration") or 0),
            buffer_before=int(field_value(obj, "buffer_before") or 0),
            buffer_after=int(field_value(obj, "buffer_after") or 0),
        )


@dataclass(frozen=True)
class AvailabilityWindow:
    """Working hours on one weekday"""
    start_time: TimeValue
    end_time: TimeValue
    day_of_week: Optional[int] = None
    is_available: bool = True

    @classmethod
    def coerce(cls, obj: Any) -> "AvailabilityWindow":
        if isinstance(obj, cls):
            return obj
        is_available = field_value(obj, "is_available", True)
        return cls(
            start_time=field_value(obj, "start_time"),
            end_time=field_value(obj, "end_time"),
            day_of_week=field_value(obj, "day_of_week"),
            is_available=True if is_available is None else bool(is_available),
        )


@dataclass(frozen=True)
class BookedInterval:
    """Face span of an existing appointment"""
    start_time: TimeValue
    end_time: TimeValue
    appointment_date: Optional[str] = None

    @classmethod
    def coerce(cls, obj: Any) -> "BookedInterval":
        if isinstance(obj, cls):
            return obj
        appointment_date = field_value(obj, "appointment_date")
        return cls(
            start_time=field_value(obj, "start_time"),
            end_time=field_value(obj, "end_time"),
            appointment_date=iso_date(appointment_date) if appointment_date else None,
        )


@dataclass(frozen=True)
class BlockedRange:
    """Inclusive date range without availability"""
    start_date: str
    end_date: str
    reason: Optional[str] = None

    def contains(self, day_iso: str) -> bool:
        # ISO dates order lexicographically
        return self.start_date <= day_iso <= self.end_date

    @classmethod
    def coerce(cls, obj: Any) -> "BlockedRange":
        if isinstance(obj, cls):
            return obj
        return cls(
            start_date=iso_date(field_value(obj, "start_date")),
            end_date=iso_date(field_value(obj, "end_date")),
            reason=field_value(obj, "reason"),
        )
