# ===== booking/models/appointment.py =====
from sqlalchemy import Column, String, Text, Date, Time, DateTime, Numeric, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import Base
import uuid

# Statuses that occupy the staff member's time
ACTIVE_STATUSES = ("confirmed", "pending")
APPOINTMENT_STATUSES = ("confirmed", "pending", "cancelled", "no-show", "completed")


class Appointment(Base):
    """
    A booking of one service with one staff member.

    Overlaps between active appointments of the same staff member are rejected
    by the no_overlapping_appointments exclusion constraint (see
    booking.config.database), not by application code.
    """
    __tablename__ = "appointments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id"), nullable=False, index=True)
    staff_id = Column(UUID(as_uuid=True), ForeignKey("staff.id"), nullable=False, index=True)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id"), nullable=True)

    # Appointment details
    appointment_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    notes = Column(Text, nullable=True)
    booked_price = Column(Numeric(10, 2), nullable=True)

    # Status tracking
    status = Column(String(20), nullable=False, default="pending")  # confirmed, pending, cancelled, no-show, completed

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    service = relationship("Service", lazy="joined")
    staff = relationship("Staff")
    customer = relationship("Customer")

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, staff_id={self.staff_id}, "
            f"{self.appointment_date} {self.start_time}-{self.end_time}, status={self.status})>"
        )

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "service_id": str(self.service_id),
            "staff_id": str(self.staff_id),
            "customer_id": str(self.customer_id) if self.customer_id else None,
            "appointment_date": self.appointment_date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "status": self.status,
            "notes": self.notes,
            "booked_price": float(self.booked_price) if self.booked_price is not None else None,
        }
