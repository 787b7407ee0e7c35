# ===== booking/services/email/email_service.py =====
import smtplib
from html import escape
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import List, Optional
import logging

from booking.config.settings import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails via SMTP"""

    @staticmethod
    def _get_smtp_connection():
        """Create and return SMTP connection"""
        try:
            if settings.EMAIL_USE_TLS:
                server = smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT)
                server.starttls()
            else:
                server = smtplib.SMTP_SSL(settings.EMAIL_HOST, settings.EMAIL_PORT)

            if settings.EMAIL_USERNAME and settings.EMAIL_PASSWORD:
                server.login(settings.EMAIL_USERNAME, settings.EMAIL_PASSWORD)

            return server
        except Exception as e:
            logger.error(f"Failed to connect to SMTP server: {e}")
            raise

    @staticmethod
    def send_email(
            to_email: str,
            subject: str,
            html_content: str,
            plain_text: Optional[str] = None,
            cc: Optional[List[str]] = None
    ) -> bool:
        """
        Send an email using SMTP

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML content of the email
            plain_text: Plain text version (fallback for non-HTML clients)
            cc: List of CC email addresses

        Returns:
            bool: True if email sent successfully
        """
        try:
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
            msg['To'] = to_email

            if cc:
                msg['Cc'] = ', '.join(cc)

            if plain_text:
                msg.attach(MIMEText(plain_text, 'plain'))
            msg.attach(MIMEText(html_content, 'html'))

            recipients = [to_email]
            if cc:
                recipients.extend(cc)

            server = EmailService._get_smtp_connection()
            server.sendmail(settings.EMAIL_FROM_ADDRESS, recipients, msg.as_string())
            server.quit()

            logger.info(f"Email sent successfully to {to_email}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            raise

    @staticmethod
    def _booking_summary(appointment) -> dict:
        service = appointment.service
        staff = appointment.staff
        return {
            "service_name": service.name if service else "your appointment",
            "staff_name": staff.name if staff else "",
            "date": appointment.appointment_date.strftime("%A, %B %d, %Y"),
            "start": appointment.start_time.strftime("%H:%M"),
            "end": appointment.end_time.strftime("%H:%M"),
        }

    @staticmethod
    def send_customer_confirmation(appointment) -> Optional[str]:
        """
        Confirmation to the customer who booked.

        Returns:
            str: address emailed, or None when the customer has no email
        """
        customer = appointment.customer
        if not customer or not customer.email:
            return None

        summary = EmailService._booking_summary(appointment)
        safe = {key: escape(value) for key, value in summary.items()}
        html_content = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
            <h2 style="margin-top: 0;">Your booking is confirmed</h2>
            <p>Hi {escape(customer.name or "there")},</p>
            <p>
                <strong>{safe["service_name"]}</strong>
                {f'with {safe["staff_name"]}' if safe["staff_name"] else ''}<br>
                {safe["date"]}, {safe["start"]} - {safe["end"]}
            </p>
            <p style="font-size: 14px; color: #777;">Need to change it? Reply to this email.</p>
        </body>
        </html>
        """
        plain_text = (
            f"Your booking is confirmed.\n\n"
            f"{summary['service_name']} on {summary['date']}, "
            f"{summary['start']} - {summary['end']}\n"
        )
        EmailService.send_email(
            to_email=customer.email,
            subject=f"Booking confirmed: {summary['service_name']} on {summary['date']}",
            html_content=html_content,
            plain_text=plain_text,
        )
        return customer.email

    @staticmethod
    def send_staff_notification(appointment) -> Optional[str]:
        """Heads-up to the staff member the appointment was booked with"""
        staff = appointment.staff
        if not staff or not staff.email:
            return None

        summary = EmailService._booking_summary(appointment)
        safe = {key: escape(value) for key, value in summary.items()}
        customer = appointment.customer
        customer_name = customer.name if customer and customer.name else "A customer"
        html_content = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <h3>New booking</h3>
            <p>{escape(customer_name)} booked <strong>{safe["service_name"]}</strong>
            on {safe["date"]} at {safe["start"]}.</p>
            {f'<p>Notes: {escape(appointment.notes)}</p>' if appointment.notes else ''}
        </body>
        </html>
        """
        EmailService.send_email(
            to_email=staff.email,
            subject=f"New booking: {summary['date']} {summary['start']}",
            html_content=html_content,
            plain_text=f"{customer_name} booked {summary['service_name']} on {summary['date']} at {summary['start']}.",
        )
        return staff.email
