# booking/core/exceptions.py
"""Domain errors raised by the service layer"""


class BookingError(Exception):
    """Base class for booking domain errors"""


class NotFoundError(BookingError):
    """Referenced service, staff member, appointment or block does not exist"""


class SlotTakenError(BookingError):
    """The store rejected an insert overlapping another active appointment"""


class BookingFailedError(BookingError):
    """Any other failure while writing an appointment"""
