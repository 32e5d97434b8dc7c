# backend/app/services/catalog.py
"""
Business and service catalog.

Plain CRUD with tombstone deletes: rows get `deleted_at` set and drop out
of get/list queries, but stay referenceable from historical bookings.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.generated import Businesses as DBBusiness
from ..models.generated import Services as DBService
from ..models.generated import utcnow
from ..schemas.businesses import BusinessCreate, BusinessUpdate
from ..schemas.services import ServiceCreate, ServiceUpdate
from .errors import ConflictError, NotFoundError
from .slug import slugify, validate_slug

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Businesses
# ──────────────────────────────────────────────────────────────────────────────

def create_business(db: Session, data: BusinessCreate) -> DBBusiness:
    slug = validate_slug(data.slug or slugify(data.name))

    obj = DBBusiness(**data.model_dump(exclude={"slug"}), slug=slug)
    db.add(obj)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Slug '{slug}' is already taken")

    logger.info(f"Business created: id={obj.id} slug={slug}")
    return obj


def get_business(db: Session, business_id: int) -> DBBusiness:
    obj = db.get(DBBusiness, business_id)
    if not obj or obj.deleted_at is not None:
        raise NotFoundError(f"Business {business_id} not found")
    return obj


def get_business_by_slug(db: Session, slug: str) -> DBBusiness:
    obj = db.scalars(
        select(DBBusiness).where(
            DBBusiness.slug == slug.strip().lower(),
            DBBusiness.deleted_at.is_(None),
        )
    ).first()
    if not obj:
        raise NotFoundError(f"Business '{slug}' not found")
    return obj


def update_business(db: Session, business_id: int, data: BusinessUpdate) -> DBBusiness:
    obj = get_business(db, business_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(obj, field, value)

    db.commit()
    return obj


def delete_business(db: Session, business_id: int) -> None:
    obj = get_business(db, business_id)
    obj.deleted_at = utcnow()
    db.commit()
    logger.info(f"Business {business_id} tombstoned")


# ──────────────────────────────────────────────────────────────────────────────
# Services
# ──────────────────────────────────────────────────────────────────────────────

def create_service(db: Session, data: ServiceCreate) -> DBService:
    get_business(db, data.business_id)

    obj = DBService(**data.model_dump())
    db.add(obj)
    db.commit()
    return obj


def get_service(db: Session, service_id: int) -> DBService:
    obj = db.get(DBService, service_id)
    if not obj or obj.deleted_at is not None:
        raise NotFoundError(f"Service {service_id} not found")
    return obj


def list_services(
    db: Session,
    business_id: int,
    offset: int = 0,
    limit: int = 20,
    include_inactive: bool = False,
) -> tuple[list[DBService], int]:
    """Services of a business ordered by name, with the unpaged total."""
    query = select(DBService).where(
        DBService.business_id == business_id,
        DBService.deleted_at.is_(None),
    )
    if not include_inactive:
        query = query.where(DBService.is_active.is_(True))

    total = db.scalar(select(func.count()).select_from(query.subquery()))
    items = db.scalars(
        query.order_by(DBService.name, DBService.id).offset(offset).limit(limit)
    ).all()
    return list(items), total


def update_service(db: Session, service_id: int, data: ServiceUpdate) -> DBService:
    """
    Partial update. Existing bookings keep their own copy of
    name/price/deposit, so nothing here touches them.
    """
    obj = get_service(db, service_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(obj, field, value)

    db.commit()
    return obj


def delete_service(db: Session, service_id: int, business_id: Optional[int] = None) -> None:
    obj = get_service(db, service_id)
    if business_id is not None and obj.business_id != business_id:
        raise NotFoundError(f"Service {service_id} not found")

    obj.is_active = False
    obj.deleted_at = utcnow()
    db.commit()
