# ============================================================================
# booking/services/appointment/appointment_service.py
# Appointment reads/writes and service timing conflict checks
# ============================================================================
import logging
from collections import defaultdict
from datetime import date, time
from typing import Optional, List, Dict, Any
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booking.config.context import get_context
from booking.core.exceptions import NotFoundError
from booking.models.appointment import Appointment, ACTIVE_STATUSES
from booking.models.service import Service
from booking.scheduling.conflicts import find_service_update_conflicts
from booking.scheduling.types import ServiceTiming

logger = logging.getLogger(__name__)


class AppointmentService:
    """Handles appointment operations"""

    @staticmethod
    def get_service(db: Session, service_id: UUID) -> Service:
        service = db.query(Service).filter(Service.id == service_id).first()
        if not service:
            raise NotFoundError(f"Service {service_id} not found")
        return service

    @staticmethod
    def get_appointment(db: Session, appointment_id: UUID) -> Appointment:
        appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return appointment

    @staticmethod
    def fetch_staff_appointments(
            db: Session,
            staff_id: UUID,
            start_date: date,
            end_date: date
    ) -> List[Appointment]:
        """Active appointments of a staff member between two dates (inclusive)"""
        return db.query(Appointment).filter(
            Appointment.staff_id == staff_id,
            Appointment.appointment_date >= start_date,
            Appointment.appointment_date <= end_date,
            Appointment.status.in_(ACTIVE_STATUSES)
        ).order_by(Appointment.appointment_date.asc(), Appointment.start_time.asc()).all()

    @staticmethod
    def fetch_future_appointments(
            db: Session,
            staff_id: Optional[UUID] = None,
            service_id: Optional[UUID] = None,
            today: Optional[date] = None
    ) -> List[Appointment]:
        """Active appointments from today on, for a staff member or a service"""
        if staff_id is None and service_id is None:
            raise ValueError("staff_id or service_id is required")

        if today is None:
            today = get_context().now().date()

        query = db.query(Appointment).filter(
            Appointment.appointment_date >= today,
            Appointment.status.in_(ACTIVE_STATUSES)
        )
        if staff_id is not None:
            query = query.filter(Appointment.staff_id == staff_id)
        if service_id is not None:
            query = query.filter(Appointment.service_id == service_id)

        return query.order_by(Appointment.appointment_date.asc(), Appointment.start_time.asc()).all()

    @staticmethod
    def check_service_update_conflicts(
            db: Session,
            service_id: UUID,
            new_duration: int,
            new_buffer_before: int,
            new_buffer_after: int,
            today: Optional[date] = None
    ) -> List[Appointment]:
        """
        Appointments of the service that the proposed timing would make overlap
        a neighbor. Empty list means the change is safe. Fetch errors propagate.

        Steps:
            1. Future active appointments of the service (all staff)
            2. Group by (staff_id, appointment_date)
            3. Per group, load the staff member's whole day (all services)
            4. Recompute own spans with the new timing and test against
               every other appointment's span under its own timing
        """
        own_appointments = AppointmentService.fetch_future_appointments(
            db, service_id=service_id, today=today
        )
        if not own_appointments:
            return []

        groups: Dict[tuple, List[Appointment]] = defaultdict(list)
        for appt in own_appointments:
            groups[(appt.staff_id, appt.appointment_date.isoformat())].append(appt)

        neighbors_by_key = {}
        for staff_id, day_iso in groups:
            day = date.fromisoformat(day_iso)
            neighbors_by_key[(staff_id, day_iso)] = AppointmentService.fetch_staff_appointments(
                db, staff_id, day, day
            )

        conflicts = find_service_update_conflicts(
            own_appointments,
            neighbors_by_key,
            ServiceTiming(new_duration, new_buffer_before, new_buffer_after),
        )

        logger.info(
            f"Service {service_id} timing check: {len(conflicts)} conflicting of "
            f"{len(own_appointments)} future appointments"
        )
        return conflicts

    @staticmethod
    def check_conflicts_in_range(
            db: Session,
            staff_id: UUID,
            start_date: date,
            end_date: date
    ) -> bool:
        """True when the staff member has any active appointment in the range"""
        count = db.query(Appointment).filter(
            Appointment.staff_id == staff_id,
            Appointment.appointment_date >= start_date,
            Appointment.appointment_date <= end_date,
            Appointment.status.in_(ACTIVE_STATUSES)
        ).count()
        return count > 0

    @staticmethod
    def create_appointment(
            db: Session,
            service_id: UUID,
            staff_id: UUID,
            appointment_date: date,
            start_time: time,
            end_time: time,
            customer_id: Optional[UUID] = None,
            status: str = "confirmed",
            notes: Optional[str] = None,
            booked_price: Optional[Any] = None
    ) -> Appointment:
        """
        Insert an appointment. The overlap constraint is the arbiter between
        concurrent bookers; its violation propagates as the driver error after
        the session is rolled back.
        """
        appointment = Appointment(
            id=uuid4(),
            service_id=service_id,
            staff_id=staff_id,
            customer_id=customer_id,
            appointment_date=appointment_date,
            start_time=start_time,
            end_time=end_time,
            status=status,
            notes=notes,
            booked_price=booked_price,
        )

        try:
            db.add(appointment)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Insert rejected for staff {staff_id} on {appointment_date} {start_time}: {e}")
            raise

        db.refresh(appointment)
        logger.info(f"Created appointment {appointment.id} for staff {staff_id} on {appointment_date} {start_time}")
        return appointment
