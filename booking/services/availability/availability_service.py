# ===== booking/services/availability/availability_service.py =====
from typing import List, Dict, Optional
from datetime import date, timedelta
from uuid import UUID
from sqlalchemy.orm import Session
from booking.config.context import get_context
from booking.core.exceptions import NotFoundError
from booking.models.availability import WeeklyAvailability, BlockedDate
from booking.schemas.scheduling import DayStatus, TimeSlot
from booking.scheduling.calendar_math import iso_date, js_day_of_week
from booking.scheduling.day_oracle import build_day_status_map
from booking.scheduling.slot_generator import generate_slots
from booking.scheduling.types import BlockedRange
from booking.services.appointment.appointment_service import AppointmentService
import logging

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Staff working hours, blocked dates and the slots derived from them"""

    @staticmethod
    def fetch_availability(db: Session, staff_id: UUID) -> List[WeeklyAvailability]:
        """All weekly rows of a staff member, available or not"""
        return db.query(WeeklyAvailability).filter(
            WeeklyAvailability.staff_id == staff_id
        ).order_by(WeeklyAvailability.day_of_week.asc(), WeeklyAvailability.start_time.asc()).all()

    @staticmethod
    def fetch_day_windows(db: Session, staff_id: UUID, day: date) -> List[WeeklyAvailability]:
        """Available rows for the weekday of `day` (0=Sunday)"""
        return db.query(WeeklyAvailability).filter(
            WeeklyAvailability.staff_id == staff_id,
            WeeklyAvailability.day_of_week == js_day_of_week(day),
            WeeklyAvailability.is_available.is_(True)
        ).order_by(WeeklyAvailability.start_time.asc()).all()

    @staticmethod
    def fetch_blocked_dates(
            db: Session,
            staff_id: UUID,
            today: Optional[date] = None
    ) -> List[BlockedDate]:
        """Blocked ranges that have not ended yet"""
        if today is None:
            today = get_context().now().date()

        return db.query(BlockedDate).filter(
            BlockedDate.staff_id == staff_id,
            BlockedDate.end_date >= today
        ).order_by(BlockedDate.start_date.asc()).all()

    @staticmethod
    def is_date_blocked(blocked_dates: List[BlockedDate], day: date) -> bool:
        day_iso = iso_date(day)
        return any(BlockedRange.coerce(block).contains(day_iso) for block in blocked_dates)

    @staticmethod
    def create_blocked_date(
            db: Session,
            staff_id: UUID,
            start_date: date,
            end_date: date,
            reason: Optional[str] = None
    ) -> BlockedDate:
        if end_date < start_date:
            raise ValueError("end_date must be on or after start_date")

        blocked = BlockedDate(
            staff_id=staff_id,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
        )
        try:
            db.add(blocked)
            db.commit()
            db.refresh(blocked)
        except Exception as e:
            logger.error(f"Error creating blocked date for staff {staff_id}: {e}")
            db.rollback()
            raise

        logger.info(f"Blocked {start_date} to {end_date} for staff {staff_id}")
        return blocked

    @staticmethod
    def delete_blocked_date(db: Session, blocked_date_id: UUID) -> None:
        blocked = db.query(BlockedDate).filter(BlockedDate.id == blocked_date_id).first()
        if not blocked:
            raise NotFoundError(f"Blocked date {blocked_date_id} not found")

        try:
            db.delete(blocked)
            db.commit()
        except Exception as e:
            logger.error(f"Error deleting blocked date {blocked_date_id}: {e}")
            db.rollback()
            raise

        logger.info(f"Removed blocked date {blocked_date_id}")

    @staticmethod
    def get_available_slots(
            db: Session,
            service_id: UUID,
            staff_id: UUID,
            day: date
    ) -> List[TimeSlot]:
        """
        Candidate slots for one service with one staff member on one day.

        Returns an empty list when the staff member does not work that weekday
        or the date falls inside a blocked range.
        """
        service = AppointmentService.get_service(db, service_id)

        windows = AvailabilityService.fetch_day_windows(db, staff_id, day)
        if not windows:
            logger.debug(f"No availability for staff {staff_id} on {day}")
            return []

        blocked = AvailabilityService.fetch_blocked_dates(db, staff_id, today=day)
        if AvailabilityService.is_date_blocked(blocked, day):
            logger.debug(f"Staff {staff_id} is blocked on {day}")
            return []

        appointments = AppointmentService.fetch_staff_appointments(db, staff_id, day, day)

        slots = generate_slots(service, windows, appointments, day)
        logger.info(
            f"Generated {len(slots)} slots ({sum(1 for s in slots if s.available)} free) "
            f"for staff {staff_id}, service {service_id} on {day}"
        )
        return slots

    @staticmethod
    def get_day_status_map(
            db: Session,
            service_id: UUID,
            staff_id: UUID,
            start_date: Optional[date] = None,
            days: Optional[int] = None
    ) -> Dict[str, DayStatus]:
        """
        Available/Busy/Unavailable for each date of the booking window.

        Everything is fetched once up front; the oracle then works on the
        snapshot.
        """
        context = get_context()
        if start_date is None:
            start_date = context.now().date()
        if days is None:
            days = context.settings.BOOKING_WINDOW_DAYS

        service = AppointmentService.get_service(db, service_id)
        end_date = start_date + timedelta(days=max(days - 1, 0))

        weekly = AvailabilityService.fetch_availability(db, staff_id)
        blocked = AvailabilityService.fetch_blocked_dates(db, staff_id, today=start_date)
        appointments = AppointmentService.fetch_staff_appointments(db, staff_id, start_date, end_date)

        return build_day_status_map(start_date, days, service, weekly, blocked, appointments)
