# ============================================================================
# booking/api/v1/appointments.py
# Booking submission and appointment listings - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, Query, Path, Response, status
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID
import logging

from booking.config.database import get_db
from booking.core.exceptions import NotFoundError
from booking.schemas.scheduling import BookingOutcome, BookingRequest, BookingResult
from booking.services.appointment.appointment_service import AppointmentService
from booking.services.booking.booking_guard import BookingGuard

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])

_OUTCOME_STATUS = {
    BookingOutcome.CONFIRMED: status.HTTP_201_CREATED,
    BookingOutcome.SLOT_TAKEN: status.HTTP_409_CONFLICT,
    BookingOutcome.FAILED: status.HTTP_400_BAD_REQUEST,
}


def get_booking_guard() -> BookingGuard:
    return BookingGuard()


@router.post("", response_model=BookingResult, status_code=status.HTTP_201_CREATED)
async def create_booking(
        request: BookingRequest,
        response: Response,
        guard: BookingGuard = Depends(get_booking_guard),
        db: Session = Depends(get_db)
):
    """
    Book a slot. 201 when confirmed, 409 when someone else took the slot
    first (the body then carries the refreshed slots), 400 otherwise.
    """
    try:
        result = await guard.submit_booking(db, request)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error submitting booking: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))

    response.status_code = _OUTCOME_STATUS[result.outcome]
    return result


@router.get("/staff/{staff_id}")
async def list_staff_appointments(
        staff_id: UUID = Path(..., description="Staff member ID"),
        start_date: date = Query(..., description="First day (inclusive)"),
        end_date: Optional[date] = Query(None, description="Last day (inclusive), defaults to start_date"),
        db: Session = Depends(get_db)
):
    """Active (confirmed/pending) appointments of a staff member"""
    end_date = end_date or start_date
    appointments = AppointmentService.fetch_staff_appointments(db, staff_id, start_date, end_date)
    return {"total": len(appointments), "appointments": [a.to_dict() for a in appointments]}


@router.get("/future")
async def list_future_appointments(
        staff_id: Optional[UUID] = Query(None),
        service_id: Optional[UUID] = Query(None),
        db: Session = Depends(get_db)
):
    """Active appointments from today on, by staff member or by service"""
    if staff_id is None and service_id is None:
        raise HTTPException(status_code=400, detail="staff_id or service_id is required")

    appointments = AppointmentService.fetch_future_appointments(db, staff_id=staff_id, service_id=service_id)
    return {"total": len(appointments), "appointments": [a.to_dict() for a in appointments]}


@router.get("/{appointment_id}")
async def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db)
):
    try:
        return AppointmentService.get_appointment(db, appointment_id).to_dict()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
