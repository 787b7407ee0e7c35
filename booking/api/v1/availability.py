# ============================================================================
# booking/api/v1/availability.py
# Slots, day statuses and blocked dates - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, Query, Path, status
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional, List
from uuid import UUID
import logging

from booking.config.context import get_context
from booking.config.database import get_db
from booking.core.exceptions import NotFoundError
from booking.schemas.scheduling import BlockedDateCreate, DayStatusResponse, TimeSlot
from booking.scheduling.calendar_math import time_options
from booking.scheduling.day_oracle import next_available_date
from booking.services.appointment.appointment_service import AppointmentService
from booking.services.availability.availability_service import AvailabilityService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("/staff/{staff_id}/slots", response_model=List[TimeSlot])
async def get_slots(
        staff_id: UUID = Path(..., description="Staff member ID"),
        service_id: UUID = Query(..., description="Service being booked"),
        day: date = Query(..., alias="date", description="Day to list slots for"),
        db: Session = Depends(get_db)
):
    """
    Every candidate start time of the day, unavailable ones included with a
    reason ("Too soon", "Already booked").
    """
    try:
        return AvailabilityService.get_available_slots(db, service_id, staff_id, day)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error generating slots for staff {staff_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/staff/{staff_id}/days", response_model=DayStatusResponse)
async def get_day_statuses(
        staff_id: UUID = Path(..., description="Staff member ID"),
        service_id: UUID = Query(..., description="Service being booked"),
        start_date: Optional[date] = Query(None, description="First day, defaults to today"),
        days: Optional[int] = Query(None, ge=1, le=366, description="Number of days, defaults to the booking window"),
        db: Session = Depends(get_db)
):
    """Available / Busy / Unavailable for each day of the booking window"""
    context = get_context()
    start_date = start_date or context.now().date()
    days = days or context.settings.BOOKING_WINDOW_DAYS

    try:
        statuses = AvailabilityService.get_day_status_map(db, service_id, staff_id, start_date, days)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error building day statuses for staff {staff_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    first_free = next_available_date(statuses)
    return DayStatusResponse(
        staff_id=str(staff_id),
        service_id=str(service_id),
        start_date=start_date.isoformat(),
        days=days,
        statuses=statuses,
        next_available_date=first_free.isoformat() if first_free else None,
    )


@router.get("/staff/{staff_id}/blocked-dates")
async def list_blocked_dates(
        staff_id: UUID = Path(..., description="Staff member ID"),
        db: Session = Depends(get_db)
):
    """Blocked ranges that have not ended yet"""
    blocked = AvailabilityService.fetch_blocked_dates(db, staff_id)
    return {"total": len(blocked), "blocked_dates": [b.to_dict() for b in blocked]}


@router.post("/staff/{staff_id}/blocked-dates", status_code=status.HTTP_201_CREATED)
async def create_blocked_date(
        payload: BlockedDateCreate,
        staff_id: UUID = Path(..., description="Staff member ID"),
        db: Session = Depends(get_db)
):
    try:
        blocked = AvailabilityService.create_blocked_date(
            db,
            staff_id=staff_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            reason=payload.reason,
        )
        return blocked.to_dict()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating blocked date: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/blocked-dates/{blocked_date_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_blocked_date(
        blocked_date_id: UUID = Path(..., description="Blocked date ID"),
        db: Session = Depends(get_db)
):
    try:
        AvailabilityService.delete_blocked_date(db, blocked_date_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting blocked date {blocked_date_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/staff/{staff_id}/conflicts")
async def check_range_conflicts(
        staff_id: UUID = Path(..., description="Staff member ID"),
        start_date: date = Query(...),
        end_date: Optional[date] = Query(None, description="Defaults to start_date"),
        db: Session = Depends(get_db)
):
    """
    Whether the staff member has active appointments in the range. Checked
    before blocking dates so existing bookings are not silently orphaned.
    """
    end_date = end_date or start_date
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must be on or after start_date")

    has_conflicts = AppointmentService.check_conflicts_in_range(db, staff_id, start_date, end_date)
    return {
        "staff_id": str(staff_id),
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "has_conflicts": has_conflicts,
    }


@router.get("/time-options", response_model=List[str])
async def get_time_options(
        min_time: Optional[str] = Query(None, description="HH:mm, first hour included"),
        max_time: Optional[str] = Query(None, description="HH:mm, last hour included"),
        step: int = Query(15, ge=1, le=60, description="Minutes between options")
):
    """Time picker options, e.g. for editing working hours"""
    try:
        return time_options(min_time, max_time, step)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
