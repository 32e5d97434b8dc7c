# backend/app/services/notifications.py
"""
Customer notifications for booking lifecycle events.

Only called after the booking transaction has committed. Delivery is
delegated to the mail worker through the event queue; nothing here raises.
"""

import logging
from datetime import datetime

from .events import emit_event

logger = logging.getLogger(__name__)

SLOT_TIME_FORMAT = "%Y-%m-%d %H:%M"


def notify_booking_confirmed(
    customer_email: str,
    customer_name: str,
    service_name: str,
    slot_time: datetime,
    deposit_paid: float,
) -> bool:
    return emit_event("booking_confirmed", {
        "to": customer_email,
        "name": customer_name,
        "service_name": service_name,
        "slot_time": slot_time.strftime(SLOT_TIME_FORMAT),
        "deposit_paid": round(float(deposit_paid), 2),
    })


def notify_booking_cancelled(
    customer_email: str,
    customer_name: str,
    service_name: str,
    slot_time: datetime,
) -> bool:
    return emit_event("booking_cancelled", {
        "to": customer_email,
        "name": customer_name,
        "service_name": service_name,
        "slot_time": slot_time.strftime(SLOT_TIME_FORMAT),
    })
