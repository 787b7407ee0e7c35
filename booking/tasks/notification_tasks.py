# ===== booking/tasks/notification_tasks.py =====
import logging
from uuid import UUID

from booking.config.celery_config import celery_app
from booking.config.database import SessionLocal
from booking.services.appointment.appointment_service import AppointmentService
from booking.services.email.email_service import EmailService

logger = logging.getLogger(__name__)

# Each recipient gets its own task so a retry never re-sends to the others
CONFIRMATION_SENDERS = {
    "customer": EmailService.send_customer_confirmation,
    "staff": EmailService.send_staff_notification,
}


@celery_app.task
def send_booking_confirmation(appointment_id: str):
    """
    Queue one confirmation email per recipient for a freshly inserted appointment

    Args:
        appointment_id: Appointment UUID as string
    """
    logger.info(f"Queueing booking confirmation emails for appointment {appointment_id}")

    for recipient in CONFIRMATION_SENDERS:
        send_booking_email.delay(appointment_id, recipient)

    return {"status": "queued", "appointment_id": appointment_id, "recipients": list(CONFIRMATION_SENDERS)}


@celery_app.task(bind=True, max_retries=3)
def send_booking_email(self, appointment_id: str, recipient: str):
    """
    Send the booking email for one recipient

    Args:
        appointment_id: Appointment UUID as string
        recipient: "customer" or "staff"
    """
    sender = CONFIRMATION_SENDERS[recipient]
    db = SessionLocal()
    try:
        appointment = AppointmentService.get_appointment(db, UUID(appointment_id))
        sent_to = sender(appointment)

        if not sent_to:
            logger.warning(f"No {recipient} address for booking confirmation of appointment {appointment_id}")
            return {"status": "skipped", "appointment_id": appointment_id, "recipient": recipient}

        logger.info(f"Booking {recipient} email for {appointment_id} sent to {sent_to}")
        return {"status": "success", "appointment_id": appointment_id, "recipient": recipient, "sent_to": sent_to}

    except Exception as exc:
        logger.error(f"Failed to send booking {recipient} email for {appointment_id}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )

    finally:
        db.close()
