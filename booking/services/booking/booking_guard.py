# ===== booking/services/booking/booking_guard.py =====
"""
Booking submission.

No check-then-insert: the insert is attempted directly and the database's
no_overlapping_appointments constraint decides between concurrent bookers.
The loser gets a slot-taken answer together with a fresh slot list.
"""
import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booking.config.database import NO_OVERLAP_CONSTRAINT
from booking.core.exceptions import SlotTakenError, BookingFailedError
from booking.models.appointment import Appointment
from booking.schemas.scheduling import BookingOutcome, BookingRequest, BookingResult
from booking.scheduling.calendar_math import add_minutes, parse_time_on_date, to_time
from booking.services.appointment.appointment_service import AppointmentService
from booking.services.availability.availability_service import AvailabilityService
from booking.services.realtime.appointment_events import AppointmentEventPublisher

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for exclusion_violation
EXCLUSION_VIOLATION = "23P01"

SLOT_TAKEN_MESSAGE = "This time slot was just booked by someone else. Please choose another time."
BOOKING_FAILED_MESSAGE = "We couldn't complete your booking. Please try again."
BOOKING_CONFIRMED_MESSAGE = "Your booking is confirmed."


def classify_insert_error(exc: Exception) -> BookingOutcome:
    """
    SLOT_TAKEN when the insert was rejected by the overlap constraint,
    FAILED for anything else.

    psycopg2 exposes the SQLSTATE as `pgcode`, psycopg 3 as `sqlstate`; both
    sit on the DBAPI error that SQLAlchemy keeps in `orig`.
    """
    orig = getattr(exc, "orig", None)

    for candidate in (exc, orig):
        if candidate is None:
            continue
        code = getattr(candidate, "pgcode", None) or getattr(candidate, "sqlstate", None)
        if code == EXCLUSION_VIOLATION:
            return BookingOutcome.SLOT_TAKEN

    if NO_OVERLAP_CONSTRAINT in str(exc) or (orig is not None and NO_OVERLAP_CONSTRAINT in str(orig)):
        return BookingOutcome.SLOT_TAKEN

    return BookingOutcome.FAILED


def enqueue_booking_confirmation(appointment: Appointment) -> None:
    """Default notifier: hand the confirmation email to the Celery worker"""
    from booking.tasks.notification_tasks import send_booking_confirmation

    send_booking_confirmation.delay(str(appointment.id))


class BookingGuard:
    """Submits bookings and turns storage rejections into user-facing results"""

    def __init__(
            self,
            publisher: Optional[AppointmentEventPublisher] = None,
            notifier: Optional[Callable[[Appointment], None]] = None
    ):
        self.publisher = publisher or AppointmentEventPublisher()
        self.notifier = notifier or enqueue_booking_confirmation

    @staticmethod
    def _insert(db: Session, request: BookingRequest, service) -> Appointment:
        start = to_time(request.start_time)
        face_start = parse_time_on_date(start, request.appointment_date)
        end = add_minutes(face_start, service.duration).time()

        try:
            return AppointmentService.create_appointment(
                db,
                service_id=request.service_id,
                staff_id=request.staff_id,
                customer_id=request.customer_id,
                appointment_date=request.appointment_date,
                start_time=start.replace(second=0, microsecond=0),
                end_time=end.replace(second=0, microsecond=0),
                status="confirmed",
                notes=request.notes,
                booked_price=service.price,
            )
        except SQLAlchemyError as e:
            if classify_insert_error(e) == BookingOutcome.SLOT_TAKEN:
                raise SlotTakenError(str(e)) from e
            raise BookingFailedError(str(e)) from e

    async def submit_booking(self, db: Session, request: BookingRequest) -> BookingResult:
        """
        Attempt to book request.start_time for the service's duration.

        Returns:
            BookingResult: CONFIRMED with the appointment, SLOT_TAKEN with the
            reloaded slots of that day, or FAILED with a generic message

        Raises:
            NotFoundError: if the service does not exist
        """
        service = AppointmentService.get_service(db, request.service_id)

        try:
            appointment = self._insert(db, request, service)

        except SlotTakenError:
            logger.info(
                f"Slot {request.appointment_date} {request.start_time} for staff "
                f"{request.staff_id} was taken concurrently"
            )
            return BookingResult(
                success=False,
                outcome=BookingOutcome.SLOT_TAKEN,
                message=SLOT_TAKEN_MESSAGE,
                available_slots=self._reload_slots(db, request),
            )

        except BookingFailedError as e:
            logger.error(f"Booking failed for staff {request.staff_id}: {e}")
            return BookingResult(
                success=False,
                outcome=BookingOutcome.FAILED,
                message=BOOKING_FAILED_MESSAGE,
            )

        appointment_data = appointment.to_dict()
        await self._after_commit(appointment, appointment_data)

        return BookingResult(
            success=True,
            outcome=BookingOutcome.CONFIRMED,
            message=BOOKING_CONFIRMED_MESSAGE,
            appointment=appointment_data,
        )

    @staticmethod
    def _reload_slots(db: Session, request: BookingRequest):
        try:
            return AvailabilityService.get_available_slots(
                db, request.service_id, request.staff_id, request.appointment_date
            )
        except Exception as e:
            logger.error(f"Could not reload slots after slot-taken rejection: {e}", exc_info=True)
            return None

    async def _after_commit(self, appointment: Appointment, appointment_data: dict) -> None:
        """Live update and confirmation email. The booking stands either way."""
        try:
            await self.publisher.publish_change(appointment_data, event="INSERT")
        except Exception as e:
            logger.error(f"Failed to publish appointment change for {appointment.id}: {e}")

        try:
            self.notifier(appointment)
        except Exception as e:
            logger.error(f"Failed to enqueue booking confirmation for {appointment.id}: {e}")
