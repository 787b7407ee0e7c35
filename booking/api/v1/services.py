# booking/api/v1/services.py
"""
Service timing endpoints

Advisory check run before a provider saves new duration/buffer values.
"""
from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from booking.config.database import get_db
from booking.core.exceptions import NotFoundError
from booking.schemas.scheduling import ConflictCheckResponse, ServiceTimingUpdate
from booking.services.appointment.appointment_service import AppointmentService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/services", tags=["services"])


@router.get("/{service_id}")
def get_service(
        service_id: UUID = Path(..., description="Service ID"),
        db: Session = Depends(get_db)
):
    try:
        return AppointmentService.get_service(db, service_id).to_dict()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{service_id}/timing-conflicts", response_model=ConflictCheckResponse)
def check_timing_conflicts(
        timing: ServiceTimingUpdate,
        service_id: UUID = Path(..., description="Service ID"),
        db: Session = Depends(get_db)
):
    """
    Future appointments of the service that would overlap a neighbor if the
    proposed duration and buffers were saved. Nothing is modified.
    """
    try:
        AppointmentService.get_service(db, service_id)

        conflicts = AppointmentService.check_service_update_conflicts(
            db,
            service_id=service_id,
            new_duration=timing.duration,
            new_buffer_before=timing.buffer_before,
            new_buffer_after=timing.buffer_after,
        )

        return ConflictCheckResponse(
            service_id=str(service_id),
            has_conflicts=bool(conflicts),
            conflicts=[appointment.to_dict() for appointment in conflicts],
        )

    except HTTPException:
        raise
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error checking timing conflicts for service {service_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
