# backend/app/routers/businesses.py
# PATCH = ALLOWED (slug is immutable), DELETE = soft-delete (deleted_at)

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..schemas.availability import (
    DayAvailability,
    DayAvailabilityRead,
    GenerateSlotsRequest,
    RecurringScheduleCreate,
    RecurringScheduleRead,
    ScheduleGenerateRequest,
)
from ..schemas.bookings import CustomerRead
from ..schemas.businesses import BusinessCreate, BusinessRead, BusinessUpdate
from ..schemas.slots import SlotRead
from ..services import catalog, customers
from ..services import slots as generator

router = APIRouter(prefix="/businesses", tags=["businesses"])


# ──────────────────────────────────────────────────────────────────────────────
# Business
# ──────────────────────────────────────────────────────────────────────────────

@router.post("/", response_model=BusinessRead, status_code=status.HTTP_201_CREATED)
def create_business(data: BusinessCreate, db: Session = Depends(get_db)):
    return catalog.create_business(db, data)


@router.get("/by-slug/{slug}", response_model=BusinessRead)
def get_business_by_slug(slug: str, db: Session = Depends(get_db)):
    return catalog.get_business_by_slug(db, slug)


@router.get("/{id}", response_model=BusinessRead)
def get_business(id: int, db: Session = Depends(get_db)):
    return catalog.get_business(db, id)


@router.patch("/{id}", response_model=BusinessRead)
def update_business(id: int, data: BusinessUpdate, db: Session = Depends(get_db)):
    return catalog.update_business(db, id, data)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_business(id: int, db: Session = Depends(get_db)):
    catalog.delete_business(db, id)


@router.get("/{id}/customers", response_model=list[CustomerRead])
def list_customers(
    id: int,
    offset: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    catalog.get_business(db, id)
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    items, _ = customers.list_customers(db, id, offset, limit)
    return items


# ──────────────────────────────────────────────────────────────────────────────
# Weekly availability + generation
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/{id}/availability", response_model=list[DayAvailabilityRead])
def get_availability(id: int, db: Session = Depends(get_db)):
    catalog.get_business(db, id)
    return generator.get_weekly_availability(db, id)


@router.put("/{id}/availability", response_model=list[DayAvailabilityRead])
def set_availability(
    id: int,
    data: list[DayAvailability],
    db: Session = Depends(get_db),
):
    return generator.set_weekly_availability(db, id, data)


@router.post("/{id}/slots/generate", response_model=list[SlotRead], status_code=status.HTTP_201_CREATED)
def generate_slots(
    id: int,
    data: GenerateSlotsRequest,
    db: Session = Depends(get_db),
):
    """Tile [start_date, end_date] using the weekly template. Existing slots are not checked."""
    return generator.generate_slots(db, id, data.start_date, data.end_date, data.duration_min)


# ──────────────────────────────────────────────────────────────────────────────
# Recurring schedules
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/{id}/schedules", response_model=list[RecurringScheduleRead])
def list_schedules(id: int, db: Session = Depends(get_db)):
    catalog.get_business(db, id)
    return generator.list_recurring_schedules(db, id)


@router.post("/{id}/schedules", response_model=RecurringScheduleRead, status_code=status.HTTP_201_CREATED)
def create_schedule(
    id: int,
    data: RecurringScheduleCreate,
    db: Session = Depends(get_db),
):
    return generator.create_recurring_schedule(db, id, data)


@router.delete("/{id}/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(id: int, schedule_id: int, db: Session = Depends(get_db)):
    generator.delete_recurring_schedule(db, id, schedule_id)


@router.post(
    "/{id}/schedules/{schedule_id}/generate",
    response_model=list[SlotRead],
    status_code=status.HTTP_201_CREATED,
)
def generate_from_schedule(
    id: int,
    schedule_id: int,
    data: ScheduleGenerateRequest | None = None,
    db: Session = Depends(get_db),
):
    data = data or ScheduleGenerateRequest()
    return generator.generate_slots_from_schedule(
        db, id, schedule_id, data.duration_min, data.start_date, data.end_date
    )
