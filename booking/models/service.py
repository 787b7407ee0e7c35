# booking/models/service.py
"""
Service Model - bookable service definitions
Each service belongs to one provider; its duration and buffers define the
time consumed by a single booking.
"""
from sqlalchemy import Column, String, Numeric, Integer, Boolean, DateTime, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid
from booking.models.base import Base


class Service(Base):
    """Source of truth for a service's duration and buffers"""
    __tablename__ = "services"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    provider_id = Column(UUID(as_uuid=True), nullable=True, index=True)

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=True)

    # Timing, all in minutes
    duration = Column(Integer, nullable=False, default=30)
    buffer_before = Column(Integer, nullable=False, default=0)
    buffer_after = Column(Integer, nullable=False, default=0)

    active = Column(Boolean, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.name}, duration={self.duration})>"

    @property
    def cycle_minutes(self) -> int:
        """Minutes consumed by one booking including both buffers"""
        return (self.duration or 0) + (self.buffer_before or 0) + (self.buffer_after or 0)

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "provider_id": str(self.provider_id) if self.provider_id else None,
            "name": self.name,
            "description": self.description,
            "price": float(self.price) if self.price is not None else None,
            "duration": self.duration,
            "buffer_before": self.buffer_before,
            "buffer_after": self.buffer_after,
            "active": self.active,
        }
