# booking/schemas/__init__.py
from .scheduling import (
    TimeSlot,
    DayStatus,
    BookingOutcome,
    BookingRequest,
    ServiceTimingUpdate,
    BlockedDateCreate,
    BookingResult,
    DayStatusResponse,
    ConflictCheckResponse
)

__all__ = [
    "TimeSlot",
    "DayStatus",
    "BookingOutcome",
    "BookingRequest",
    "ServiceTimingUpdate",
    "BlockedDateCreate",
    "BookingResult",
    "DayStatusResponse",
    "ConflictCheckResponse",
]
