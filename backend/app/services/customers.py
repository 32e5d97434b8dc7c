# backend/app/services/customers.py

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.generated import Customers as DBCustomer

logger = logging.getLogger(__name__)


def _find(db: Session, business_id: int, email: str) -> DBCustomer | None:
    return db.scalars(
        select(DBCustomer).where(
            DBCustomer.business_id == business_id,
            DBCustomer.email == email,
        )
    ).first()


def find_or_create_customer(
    db: Session,
    business_id: int,
    name: str,
    email: str,
    phone: str,
) -> DBCustomer:
    """
    Resolve a customer by (business, email), creating it on first sight.

    Runs inside the caller's transaction and does not commit. A concurrent
    insert of the same email trips uq_customers_business_email; the
    savepoint is rolled back and the winner's row is returned instead.
    """
    email = email.strip().lower()

    customer = _find(db, business_id, email)
    if customer:
        return customer

    customer = DBCustomer(
        business_id=business_id,
        name=name,
        email=email,
        phone=phone,
    )
    try:
        with db.begin_nested():
            db.add(customer)
    except IntegrityError:
        logger.info(f"Customer {email} created concurrently for business {business_id}, reusing")
        customer = _find(db, business_id, email)
        if customer is None:
            raise
    return customer


def list_customers(
    db: Session,
    business_id: int,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[DBCustomer], int]:
    query = select(DBCustomer).where(DBCustomer.business_id == business_id)
    total = db.scalar(select(func.count()).select_from(query.subquery()))
    items = db.scalars(
        query.order_by(DBCustomer.created_at.desc(), DBCustomer.id.desc())
        .offset(offset)
        .limit(limit)
    ).all()
    return list(items), total
