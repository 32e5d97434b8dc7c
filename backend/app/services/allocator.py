# backend/app/services/allocator.py
"""
Booking allocator: reserves and releases slot capacity.

Every operation runs as one database transaction and either commits
completely or rolls back completely. Customer notifications go out
strictly after commit and can never undo a booking.

Capacity is protected in two layers:
1. pessimistic strategy: the slot row is read with SELECT ... FOR UPDATE,
   so competing transactions queue on the lock;
2. always: occupancy is bumped by a conditional UPDATE
   (booked_count < capacity); zero affected rows means the slot filled up
   after our read and the whole booking is rolled back with SlotFullError.

The read-time capacity check is only a fast path for the common case.
"""

import logging
from contextlib import contextmanager
from typing import Literal, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..models.generated import Bookings as DBBooking
from ..models.generated import BookingHistory as DBHistory
from ..models.generated import Services as DBService
from ..models.generated import Slots as DBSlot
from ..models.generated import utcnow
from ..schemas.bookings import BookingStatus, CustomerDetails
from . import ledger, slot_store
from .catalog import get_business
from .customers import find_or_create_customer
from .errors import BadRequestError, BookingError, InternalError, NotFoundError, SlotFullError
from .notifications import notify_booking_cancelled, notify_booking_confirmed

logger = logging.getLogger(__name__)

LockStrategy = Literal["pessimistic", "optimistic"]


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────

def _apply_statement_timeout(db: Session) -> None:
    ms = settings.booking_statement_timeout_ms
    if ms > 0 and db.get_bind().dialect.name == "postgresql":
        # SET LOCAL ends with the transaction; a timeout aborts it
        db.execute(text(f"SET LOCAL statement_timeout = {int(ms)}"))


@contextmanager
def _transaction(db: Session, what: str):
    """Commit on success; roll back on any failure and re-raise typed."""
    try:
        _apply_statement_timeout(db)
        yield
        db.commit()
    except BookingError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"{what} failed, transaction rolled back")
        raise InternalError(f"{what} failed") from e
    except BaseException:
        db.rollback()
        raise


def _notify(fn, *args) -> None:
    try:
        fn(*args)
    except Exception:
        logger.exception(f"Notification {fn.__name__} failed")


def _parse_status(value) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        raise BadRequestError(f"Unknown booking status: {value}")


def _load_booking_for_change(
    db: Session,
    booking_id: int,
    business_id: Optional[int],
) -> DBBooking:
    booking = ledger.get_booking(db, booking_id, for_update=True)
    if business_id is not None and booking.business_id != business_id:
        # other tenants' bookings do not exist from the caller's point of view
        raise NotFoundError(f"Booking {booking_id} not found")
    return booking


# ──────────────────────────────────────────────────────────────────────────────
# Create
# ──────────────────────────────────────────────────────────────────────────────

def create_booking(
    db: Session,
    business_id: int,
    service_id: int,
    slot_id: int,
    customer: CustomerDetails,
    notes: Optional[str] = None,
    actor_id: Optional[str] = None,
    strategy: Optional[LockStrategy] = None,
) -> DBBooking:
    """
    Reserve one unit of the slot's capacity and record a PENDING booking.

    Raises:
        NotFoundError: slot, business or service missing (or tombstoned)
        BadRequestError: slot/service belong to another business, inactive service
        SlotFullError: no capacity left, including a lost race
        InternalError: storage failure
    """
    strategy = strategy or settings.booking_lock_strategy

    with _transaction(db, "Create booking"):
        # Step 1: slot, exclusively under the pessimistic strategy
        slot = slot_store.get_slot(db, slot_id, for_update=(strategy == "pessimistic"))

        # Step 2: tenant check
        if slot.business_id != business_id:
            raise BadRequestError("Slot does not belong to this business")
        get_business(db, business_id)

        # Step 3: capacity hint; the conditional UPDATE below decides
        if slot.booked_count >= slot.capacity:
            logger.info(f"Slot {slot_id} full at read time ({slot.booked_count}/{slot.capacity})")
            raise SlotFullError("Slot is fully booked")

        # Step 4: service
        service = db.get(DBService, service_id)
        if service is None or service.deleted_at is not None:
            raise NotFoundError(f"Service {service_id} not found")
        if service.business_id != business_id:
            raise BadRequestError("Service does not belong to this business")
        if not service.is_active:
            raise BadRequestError("Service is not active")
        if slot.service_id is not None and slot.service_id != service.id:
            raise BadRequestError("Slot is reserved for a different service")

        # Step 5: customer, find-or-create by (business, email)
        db_customer = find_or_create_customer(
            db, business_id, customer.name, customer.email, customer.phone
        )

        # Step 6: booking with service values frozen at booking time
        booking = ledger.insert_booking(db, DBBooking(
            business_id=business_id,
            service_id=service.id,
            slot_id=slot.id,
            customer_id=db_customer.id,
            customer_name=customer.name,
            customer_email=db_customer.email,
            customer_phone=customer.phone,
            service_name=service.name,
            slot_time=slot.start_time,
            deposit_paid=service.deposit_amount,
            total_price=service.total_price,
            status=BookingStatus.PENDING.value,
            notes=notes,
        ))

        # Steps 7-8: conditional increment, sets is_booked when it hits capacity
        if not slot_store.increment_occupancy(db, slot.id):
            logger.info(f"Slot {slot_id} filled concurrently, booking rolled back")
            raise SlotFullError("Slot is fully booked")

        # Step 9
        ledger.append_history(
            db, booking.id, "created", None, BookingStatus.PENDING.value, actor_id
        )

    logger.info(
        f"Booking {booking.id} created: business={business_id} slot={slot_id} "
        f"customer={booking.customer_email} strategy={strategy}"
    )

    _notify(
        notify_booking_confirmed,
        booking.customer_email,
        booking.customer_name,
        booking.service_name,
        booking.slot_time,
        booking.deposit_paid,
    )
    return booking


# ──────────────────────────────────────────────────────────────────────────────
# Read
# ──────────────────────────────────────────────────────────────────────────────

def get_booking(db: Session, booking_id: int, business_id: Optional[int] = None) -> DBBooking:
    booking = ledger.get_booking(db, booking_id)
    if business_id is not None and booking.business_id != business_id:
        raise NotFoundError(f"Booking {booking_id} not found")
    return booking


def list_bookings(
    db: Session,
    business_id: int,
    offset: int = 0,
    limit: Optional[int] = None,
) -> tuple[list[DBBooking], int]:
    limit = limit or settings.default_page_size
    limit = max(1, min(limit, settings.max_page_size))
    return ledger.list_bookings(db, business_id, max(0, offset), limit)


def get_booking_history(
    db: Session,
    booking_id: int,
    business_id: Optional[int] = None,
) -> list[DBHistory]:
    get_booking(db, booking_id, business_id)
    return ledger.list_history(db, booking_id)


# ──────────────────────────────────────────────────────────────────────────────
# Status changes
# ──────────────────────────────────────────────────────────────────────────────

def update_booking_status(
    db: Session,
    booking_id: int,
    new_status,
    actor_id: Optional[str] = None,
    business_id: Optional[int] = None,
    reason: Optional[str] = None,
) -> DBBooking:
    """
    Move a booking to any status; no transition table is enforced.

    Occupancy follows the CANCELLED boundary:
    - into CANCELLED releases the slot (delegated to cancel_booking)
    - out of CANCELLED takes the slot again: SlotFullError if it filled up,
      BadRequestError if the slot was deleted
    - all other moves leave occupancy alone
    Setting the current status again is a no-op without a history row.
    """
    status = _parse_status(new_status)
    if status is BookingStatus.CANCELLED:
        return cancel_booking(db, booking_id, reason, actor_id, business_id)

    changed = False
    with _transaction(db, "Update booking status"):
        booking = _load_booking_for_change(db, booking_id, business_id)
        previous = booking.status

        if previous != status.value:
            if previous == BookingStatus.CANCELLED.value:
                slot = db.get(DBSlot, booking.slot_id, populate_existing=True)
                if slot is None or slot.deleted_at is not None:
                    raise BadRequestError("Slot has been deleted, booking cannot be reinstated")
                if not slot_store.increment_occupancy(db, booking.slot_id):
                    raise SlotFullError("Slot is fully booked, booking cannot be reinstated")
                booking.cancelled_at = None
                booking.cancel_reason = None

            ledger.set_status(db, booking, status.value, "status_updated", actor_id)
            changed = True

    if changed:
        logger.info(f"Booking {booking_id}: {previous} → {status.value} by {actor_id}")
    return booking


def cancel_booking(
    db: Session,
    booking_id: int,
    reason: Optional[str] = None,
    actor_id: Optional[str] = None,
    business_id: Optional[int] = None,
) -> DBBooking:
    """
    Cancel a booking and give its unit of capacity back to the slot, in
    the same transaction. Cancelling a cancelled booking changes nothing.
    """
    changed = False
    with _transaction(db, "Cancel booking"):
        booking = _load_booking_for_change(db, booking_id, business_id)
        previous = booking.status

        if previous != BookingStatus.CANCELLED.value:
            slot_store.decrement_occupancy(db, booking.slot_id)
            booking.cancelled_at = utcnow()
            booking.cancel_reason = reason
            ledger.set_status(db, booking, BookingStatus.CANCELLED.value, "cancelled", actor_id)
            changed = True

    if not changed:
        return booking

    logger.info(f"Booking {booking_id} cancelled ({previous} → CANCELLED) by {actor_id}")

    _notify(
        notify_booking_cancelled,
        booking.customer_email,
        booking.customer_name,
        booking.service_name,
        booking.slot_time,
    )
    return booking
