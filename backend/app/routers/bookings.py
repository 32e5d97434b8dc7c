# backend/app/routers/bookings.py
# Bookings are never deleted: DELETE = 405, cancellation is a status change.

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..schemas.bookings import (
    BookingCancel,
    BookingCreate,
    BookingHistoryRead,
    BookingList,
    BookingRead,
    BookingStatusUpdate,
)
from ..services import allocator

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/", response_model=BookingList)
def list_bookings(
    business_id: int,
    offset: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    items, total = allocator.list_bookings(db, business_id, offset, limit)
    return BookingList(items=items, total=total, offset=offset, limit=limit)


@router.get("/{id}", response_model=BookingRead)
def get_booking(
    id: int,
    business_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    return allocator.get_booking(db, id, business_id)


@router.get("/{id}/history", response_model=list[BookingHistoryRead])
def get_booking_history(
    id: int,
    business_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    return allocator.get_booking_history(db, id, business_id)


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    x_actor_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    """
    Reserve a slot. 409 SLOT_FULL means the slot has no capacity left;
    the client should offer another slot.
    """
    return allocator.create_booking(
        db,
        business_id=data.business_id,
        service_id=data.service_id,
        slot_id=data.slot_id,
        customer=data.customer,
        notes=data.notes,
        actor_id=x_actor_id,
    )


@router.patch("/{id}/status", response_model=BookingRead)
def update_booking_status(
    id: int,
    data: BookingStatusUpdate,
    business_id: Optional[int] = None,
    x_actor_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    return allocator.update_booking_status(
        db, id, data.status, actor_id=x_actor_id, business_id=business_id, reason=data.reason
    )


@router.post("/{id}/cancel", response_model=BookingRead)
def cancel_booking(
    id: int,
    data: BookingCancel | None = None,
    business_id: Optional[int] = None,
    x_actor_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    reason = data.reason if data else None
    return allocator.cancel_booking(db, id, reason, actor_id=x_actor_id, business_id=business_id)


@router.delete("/{id}")
def delete_not_allowed(id: int):
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
