"""
Pydantic schemas for slots, day statuses, bookings and conflict checks
"""
from datetime import date
from enum import Enum
from typing import Optional, List, Dict, Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from booking.scheduling.calendar_math import to_time


# ============================================================================
# Derived scheduling values
# ============================================================================

class TimeSlot(BaseModel):
    """Candidate start time for one booking on a given day"""
    time: str  # HH:mm
    available: bool
    reason: Optional[str] = None


class DayStatus(str, Enum):
    """Calendar day classification for date pickers"""
    AVAILABLE = "Available"
    BUSY = "Busy"
    UNAVAILABLE = "Unavailable"


class BookingOutcome(str, Enum):
    CONFIRMED = "confirmed"
    SLOT_TAKEN = "slot_taken"
    FAILED = "failed"


# ============================================================================
# Request Schemas (for incoming data)
# ============================================================================

class BookingRequest(BaseModel):
    """Schema for a customer booking submission"""
    service_id: UUID
    staff_id: UUID
    customer_id: Optional[UUID] = None
    appointment_date: date
    start_time: str = Field(..., description="HH:mm")
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator('start_time')
    @classmethod
    def validate_start_time(cls, v):
        to_time(v)
        return v


class ServiceTimingUpdate(BaseModel):
    """Proposed new timing for a service"""
    duration: int = Field(..., gt=0, description="Duration in minutes")
    buffer_before: int = Field(0, ge=0)
    buffer_after: int = Field(0, ge=0)


class BlockedDateCreate(BaseModel):
    """Schema for blocking a date range for a staff member"""
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=200)

    @model_validator(mode='after')
    def validate_range(self):
        if self.end_date < self.start_date:
            raise ValueError('end_date must be on or after start_date')
        return self


# ============================================================================
# Response Schemas (for outgoing data)
# ============================================================================

class BookingResult(BaseModel):
    """Result of a booking attempt"""
    success: bool
    outcome: BookingOutcome
    message: str
    appointment: Optional[Dict[str, Any]] = None
    available_slots: Optional[List[TimeSlot]] = None


class DayStatusResponse(BaseModel):
    staff_id: str
    service_id: str
    start_date: str
    days: int
    statuses: Dict[str, DayStatus]
    next_available_date: Optional[str] = None


class ConflictCheckResponse(BaseModel):
    service_id: str
    has_conflicts: bool
    conflicts: List[Dict[str, Any]]
