# booking/models/__init__.py
from .base import Base
from .service import Service
from .staff import Staff, Customer
from .availability import WeeklyAvailability, BlockedDate
from .appointment import Appointment, ACTIVE_STATUSES, APPOINTMENT_STATUSES

__all__ = [
    "Base",
    "Service",
    "Staff",
    "Customer",
    "WeeklyAvailability",
    "BlockedDate",
    "Appointment",
    "ACTIVE_STATUSES",
    "APPOINTMENT_STATUSES",
]
