# backend/app/routers/slots.py
"""
Slots API endpoints.

GET  /slots/available - bookable slots of a business (free capacity only)
POST /slots           - create a single slot
Bulk generation lives under /businesses/{id}/slots/generate.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.slots import SlotCreate, SlotRead
from ..services import slot_store

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/available", response_model=list[SlotRead])
def list_available_slots(
    business_id: int,
    service_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: Session = Depends(get_db),
):
    """Free slots ordered by start time. With service_id, service-less slots are included."""
    return slot_store.list_available_slots(db, business_id, service_id, start, end)


@router.get("/{id}", response_model=SlotRead)
def get_slot(id: int, db: Session = Depends(get_db)):
    return slot_store.get_slot(db, id)


@router.post("/", response_model=SlotRead, status_code=status.HTTP_201_CREATED)
def create_slot(data: SlotCreate, db: Session = Depends(get_db)):
    return slot_store.create_slot(db, data)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_slot(
    id: int,
    business_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    slot_store.delete_slot(db, id, business_id)
