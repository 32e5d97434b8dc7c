from .generated import (
    Base,
    BookingHistory,
    Bookings,
    BusinessAvailability,
    Businesses,
    Customers,
    RecurringSchedules,
    Services,
    Slots,
    metadata,
)

__all__ = [
    "Base",
    "metadata",
    "Businesses",
    "BusinessAvailability",
    "Services",
    "Slots",
    "Customers",
    "Bookings",
    "BookingHistory",
    "RecurringSchedules",
]
