"""Tests for booking confirmation emails and the Celery tasks sending them"""
from datetime import time
from unittest.mock import call, patch

import pytest

from booking.models import Appointment
from booking.services.email.email_service import EmailService
from booking.tasks.notification_tasks import send_booking_confirmation, send_booking_email


def _booked(db_session, seed, with_customer=True, customer_name="Sam", notes=None):
    staff = seed.staff()
    service = seed.service()
    appointment = seed.appointment(staff, service, start=time(10, 0))
    if with_customer:
        appointment.customer_id = seed.customer(name=customer_name).id
    appointment.notes = notes
    db_session.commit()
    return db_session.query(Appointment).filter(Appointment.id == appointment.id).one()


class TestEmailService:

    def test_customer_confirmation(self, db_session, seed):
        appointment = _booked(db_session, seed)

        with patch.object(EmailService, "send_email", return_value=True) as send_email:
            sent_to = EmailService.send_customer_confirmation(appointment)

        assert sent_to == "sam@example.com"
        sent = send_email.call_args.kwargs
        assert sent["subject"].startswith("Booking confirmed: Haircut")
        assert "10:00 - 10:45" in sent["plain_text"]

    def test_staff_notification(self, db_session, seed):
        appointment = _booked(db_session, seed, notes="Short on the sides")

        with patch.object(EmailService, "send_email", return_value=True) as send_email:
            sent_to = EmailService.send_staff_notification(appointment)

        assert sent_to == "alex@example.com"
        assert "Notes: Short on the sides" in send_email.call_args.kwargs["html_content"]

    def test_without_customer(self, db_session, seed):
        appointment = _booked(db_session, seed, with_customer=False)

        with patch.object(EmailService, "send_email", return_value=True) as send_email:
            assert EmailService.send_customer_confirmation(appointment) is None
            assert EmailService.send_staff_notification(appointment) == "alex@example.com"

        assert send_email.call_count == 1
        assert "A customer booked" in send_email.call_args.kwargs["html_content"]

    def test_user_text_is_escaped_in_html(self, db_session, seed):
        appointment = _booked(
            db_session, seed,
            customer_name="<b>Eve</b>",
            notes='<a href="http://evil.example">click</a>',
        )

        with patch.object(EmailService, "send_email", return_value=True) as send_email:
            EmailService.send_customer_confirmation(appointment)
            EmailService.send_staff_notification(appointment)

        customer_html = send_email.call_args_list[0].kwargs["html_content"]
        staff_html = send_email.call_args_list[1].kwargs["html_content"]

        assert "<b>Eve</b>" not in customer_html
        assert "Hi &lt;b&gt;Eve&lt;/b&gt;," in customer_html
        assert "<a href=" not in staff_html
        assert "&lt;b&gt;Eve&lt;/b&gt; booked" in staff_html
        assert "Notes: &lt;a href=&quot;http://evil.example&quot;&gt;click&lt;/a&gt;" in staff_html
        # Plain text parts are not HTML
        assert send_email.call_args_list[1].kwargs["plain_text"].startswith("<b>Eve</b> booked")


class TestSendBookingConfirmationTask:

    def test_queues_one_email_per_recipient(self):
        with patch("booking.tasks.notification_tasks.send_booking_email.delay") as delay:
            result = send_booking_confirmation("a-1")

        assert delay.call_args_list == [call("a-1", "customer"), call("a-1", "staff")]
        assert result == {"status": "queued", "appointment_id": "a-1", "recipients": ["customer", "staff"]}


class TestSendBookingEmailTask:

    def test_sends_to_recipient(self, db_session, seed):
        appointment_id = str(_booked(db_session, seed).id)

        with patch("booking.tasks.notification_tasks.SessionLocal", return_value=db_session), \
                patch.object(EmailService, "send_email", return_value=True) as send_email:
            result = send_booking_email(appointment_id, "customer")

        assert result["status"] == "success"
        assert result["sent_to"] == "sam@example.com"
        assert send_email.call_count == 1

    def test_missing_address_is_skipped(self, db_session, seed):
        appointment_id = str(_booked(db_session, seed, with_customer=False).id)

        with patch("booking.tasks.notification_tasks.SessionLocal", return_value=db_session), \
                patch.object(EmailService, "send_email", return_value=True) as send_email:
            result = send_booking_email(appointment_id, "customer")

        assert result["status"] == "skipped"
        send_email.assert_not_called()

    def test_staff_failure_does_not_resend_to_customer(self, db_session, seed):
        appointment_id = str(_booked(db_session, seed).id)

        with patch("booking.tasks.notification_tasks.SessionLocal", return_value=db_session), \
                patch.object(EmailService, "send_email", side_effect=ConnectionError("smtp down")) as send_email:
            # Called directly, retry() re-raises the original error
            with pytest.raises(ConnectionError):
                send_booking_email(appointment_id, "staff")

        assert [c.kwargs["to_email"] for c in send_email.call_args_list] == ["alex@example.com"]
