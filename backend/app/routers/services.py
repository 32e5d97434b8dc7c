# backend/app/routers/services.py
# PATCH = ALLOWED, DELETE = soft-delete (deleted_at)

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..schemas.services import (
    ServiceCreate,
    ServiceList,
    ServiceRead,
    ServiceUpdate,
)
from ..services import catalog

router = APIRouter(prefix="/services", tags=["services"])


@router.get("/", response_model=ServiceList)
def list_services(
    business_id: int,
    offset: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    items, total = catalog.list_services(db, business_id, offset, limit, include_inactive)
    return ServiceList(items=items, total=total, offset=offset, limit=limit)


@router.get("/{id}", response_model=ServiceRead)
def get_service(id: int, db: Session = Depends(get_db)):
    return catalog.get_service(db, id)


@router.post("/", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(
    data: ServiceCreate,
    db: Session = Depends(get_db),
):
    return catalog.create_service(db, data)


@router.patch("/{id}", response_model=ServiceRead)
def update_service(
    id: int,
    data: ServiceUpdate,
    db: Session = Depends(get_db),
):
    return catalog.update_service(db, id, data)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(
    id: int,
    business_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    catalog.delete_service(db, id, business_id)
