# backend/app/services/slot_store.py
"""
Slot persistence and occupancy primitives.

Occupancy (`booked_count`) is only ever changed through
increment_occupancy / decrement_occupancy. Both are single conditional
UPDATE statements; the affected row count is the answer, never a value
read earlier in the transaction.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from ..models.generated import Businesses as DBBusiness
from ..models.generated import Services as DBService
from ..models.generated import Slots as DBSlot
from ..models.generated import utcnow
from ..schemas.slots import SlotCreate
from .catalog import get_business, get_service
from .errors import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


def resolve_capacity(
    business: DBBusiness,
    service: Optional[DBService] = None,
    explicit: Optional[int] = None,
) -> int:
    """explicit value > service.max_capacity > business.max_bookings"""
    if explicit:
        return explicit
    if service is not None and service.max_capacity:
        return service.max_capacity
    return business.max_bookings or 1


# ── Write ────────────────────────────────────────────────────────────────

def create_slot(db: Session, data: SlotCreate) -> DBSlot:
    business = get_business(db, data.business_id)

    service = None
    if data.service_id is not None:
        service = get_service(db, data.service_id)
        if service.business_id != business.id:
            raise BadRequestError("Service does not belong to this business")

    slot = DBSlot(
        business_id=business.id,
        service_id=data.service_id,
        start_time=data.start_time,
        end_time=data.end_time,
        capacity=resolve_capacity(business, service, data.capacity),
        booked_count=0,
        is_booked=False,
    )
    db.add(slot)
    db.commit()
    return slot


def create_slots(db: Session, slots: list[DBSlot]) -> list[DBSlot]:
    """Bulk insert in one transaction: all rows or none."""
    if not slots:
        return []
    try:
        db.add_all(slots)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return slots


def delete_slot(db: Session, slot_id: int, business_id: Optional[int] = None) -> None:
    """
    Tombstone a slot. Occupied slots may be deleted as well; their
    bookings keep pointing at the tombstoned row.
    """
    slot = get_slot(db, slot_id)
    if business_id is not None and slot.business_id != business_id:
        raise NotFoundError(f"Slot {slot_id} not found")

    if slot.booked_count > 0:
        logger.warning(
            f"Deleting slot {slot_id} with {slot.booked_count} active booking(s)"
        )
    slot.deleted_at = utcnow()
    db.commit()


# ── Read ─────────────────────────────────────────────────────────────────

def get_slot(db: Session, slot_id: int, for_update: bool = False) -> DBSlot:
    """
    Fetch a live slot. for_update=True takes a row lock held until the
    surrounding transaction ends (no-op on SQLite, where BEGIN IMMEDIATE
    already serializes writers).
    """
    query = (
        select(DBSlot)
        .where(DBSlot.id == slot_id, DBSlot.deleted_at.is_(None))
        .execution_options(populate_existing=True)
    )
    if for_update:
        query = query.with_for_update()

    slot = db.scalars(query).first()
    if slot is None:
        raise NotFoundError(f"Slot {slot_id} not found")
    return slot


def list_available_slots(
    db: Session,
    business_id: int,
    service_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list[DBSlot]:
    """
    Live slots of a business with free capacity, earliest first.

    With service_id: slots tied to that service plus service-less slots.
    """
    query = select(DBSlot).where(
        DBSlot.business_id == business_id,
        DBSlot.deleted_at.is_(None),
        DBSlot.booked_count < DBSlot.capacity,
    )
    if service_id is not None:
        query = query.where(
            (DBSlot.service_id == service_id) | DBSlot.service_id.is_(None)
        )
    if start is not None:
        query = query.where(DBSlot.start_time >= start)
    if end is not None:
        query = query.where(DBSlot.end_time <= end)

    return list(db.scalars(query.order_by(DBSlot.start_time, DBSlot.id)).all())


# ── Occupancy ────────────────────────────────────────────────────────────

def _expire_cached(db: Session, slot_id: int) -> None:
    # the UPDATEs below bypass the identity map; force a reload on next access
    cached = db.identity_map.get(db.identity_key(DBSlot, slot_id))
    if cached is not None:
        db.expire(cached)


def increment_occupancy(db: Session, slot_id: int) -> bool:
    """
    UPDATE slots SET booked_count = booked_count + 1, is_booked = ...
    WHERE id = :id AND booked_count < capacity AND deleted_at IS NULL

    Returns False when no row matched: the slot is full (or gone).
    Does not commit.
    """
    result = db.execute(
        update(DBSlot)
        .where(
            DBSlot.id == slot_id,
            DBSlot.deleted_at.is_(None),
            DBSlot.booked_count < DBSlot.capacity,
        )
        .values(
            booked_count=DBSlot.booked_count + 1,
            is_booked=case((DBSlot.booked_count + 1 >= DBSlot.capacity, True), else_=False),
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    _expire_cached(db, slot_id)
    return result.rowcount == 1


def decrement_occupancy(db: Session, slot_id: int) -> bool:
    """
    Release one unit of occupancy, floored at zero. Clears is_booked once
    occupancy drops below capacity. Applies to tombstoned slots too.
    Does not commit.
    """
    result = db.execute(
        update(DBSlot)
        .where(DBSlot.id == slot_id, DBSlot.booked_count > 0)
        .values(
            booked_count=DBSlot.booked_count - 1,
            is_booked=case((DBSlot.booked_count - 1 >= DBSlot.capacity, True), else_=False),
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    _expire_cached(db, slot_id)
    if result.rowcount == 0:
        logger.warning(f"Slot {slot_id} occupancy already at zero, nothing to release")
        return False
    return True
