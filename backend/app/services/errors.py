# backend/app/services/errors.py
"""
Typed failures raised by the service layer.

Routers never build HTTP errors for these themselves. The handlers
registered in main.py map each class to its status code.
"""


class BookingError(Exception):
    """Base class for expected, typed service failures."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BookingError):
    status_code = 404
    code = "NOT_FOUND"


class BadRequestError(BookingError):
    """Malformed input or a reference that crosses tenants."""

    status_code = 400
    code = "VALIDATION_ERROR"


class ConflictError(BookingError):
    status_code = 409
    code = "CONFLICT"


class SlotFullError(ConflictError):
    """Slot has no free capacity. Routine outcome, the caller picks another slot."""

    code = "SLOT_FULL"


class InternalError(BookingError):
    """Storage failure. The transaction has already been rolled back."""
