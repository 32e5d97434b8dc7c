# backend/app/services/ledger.py
"""
Booking ledger: bookings plus their append-only history trail.

Nothing here commits. Every status change must go through set_status,
which writes the booking row and its history row in the caller's
transaction.
"""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from ..models.generated import BookingHistory as DBHistory
from ..models.generated import Bookings as DBBooking
from ..models.generated import utcnow
from .errors import NotFoundError


def insert_booking(db: Session, booking: DBBooking) -> DBBooking:
    db.add(booking)
    db.flush()
    return booking


def get_booking(db: Session, booking_id: int, for_update: bool = False) -> DBBooking:
    """Booking with business/service/slot/customer loaded for response assembly."""
    query = select(DBBooking).where(DBBooking.id == booking_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    else:
        query = query.options(
            joinedload(DBBooking.business),
            joinedload(DBBooking.service),
            joinedload(DBBooking.slot),
            joinedload(DBBooking.customer),
        )

    booking = db.scalars(query).first()
    if booking is None:
        raise NotFoundError(f"Booking {booking_id} not found")
    return booking


def list_bookings(
    db: Session,
    business_id: int,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[DBBooking], int]:
    """Newest first, with the unpaged total."""
    total = db.scalar(
        select(func.count()).select_from(DBBooking).where(DBBooking.business_id == business_id)
    )
    items = db.scalars(
        select(DBBooking)
        .where(DBBooking.business_id == business_id)
        .options(joinedload(DBBooking.slot), joinedload(DBBooking.customer))
        .order_by(DBBooking.created_at.desc(), DBBooking.id.desc())
        .offset(offset)
        .limit(limit)
    ).all()
    return list(items), total


def append_history(
    db: Session,
    booking_id: int,
    action: str,
    previous_status: Optional[str],
    new_status: str,
    performed_by: Optional[str] = None,
) -> DBHistory:
    entry = DBHistory(
        booking_id=booking_id,
        action=action,
        previous_status=previous_status,
        new_status=new_status,
        performed_by=performed_by,
    )
    db.add(entry)
    db.flush()
    return entry


def set_status(
    db: Session,
    booking: DBBooking,
    new_status: str,
    action: str,
    performed_by: Optional[str] = None,
) -> DBHistory:
    """Change booking.status and record the transition."""
    previous = booking.status
    booking.status = new_status
    booking.updated_at = utcnow()
    return append_history(db, booking.id, action, previous, new_status, performed_by)


def list_history(db: Session, booking_id: int) -> list[DBHistory]:
    """History rows in commit order."""
    return list(
        db.scalars(
            select(DBHistory)
            .where(DBHistory.booking_id == booking_id)
            .order_by(DBHistory.id)
        ).all()
    )
