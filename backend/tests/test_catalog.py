import pytest

from app.schemas.businesses import BusinessCreate, BusinessUpdate
from app.schemas.services import ServiceUpdate
from app.services import catalog
from app.services.errors import BadRequestError, ConflictError, NotFoundError
from app.services.slug import slugify


def test_slug_generated_from_name(db):
    business = catalog.create_business(db, BusinessCreate(name="Café Lumière", vertical="beauty"))

    assert business.slug == "cafe-lumiere"
    assert catalog.get_business_by_slug(db, "Cafe-Lumiere").id == business.id


def test_slugify_fallback():
    assert slugify("!!!") == "business"


def test_duplicate_slug_conflicts(db, make_business):
    make_business(slug="glow")

    with pytest.raises(ConflictError):
        make_business(slug="glow")


@pytest.mark.parametrize("slug", ["admin", "-bad", "ab", "Has Space"])
def test_invalid_or_reserved_slug(db, make_business, slug):
    with pytest.raises(BadRequestError):
        make_business(slug=slug)


def test_update_business(db, business):
    updated = catalog.update_business(db, business.id, BusinessUpdate(max_bookings=5))

    assert updated.max_bookings == 5
    assert updated.slug == business.slug


def test_deleted_business_is_gone(db, business):
    catalog.delete_business(db, business.id)

    with pytest.raises(NotFoundError):
        catalog.get_business(db, business.id)
    with pytest.raises(NotFoundError):
        catalog.get_business_by_slug(db, business.slug)


def test_list_services_paginated_by_name(db, business, make_service):
    for name in ["Pedicure", "Haircut", "Massage"]:
        make_service(business, name=name)

    items, total = catalog.list_services(db, business.id, offset=0, limit=2)

    assert total == 3
    assert [s.name for s in items] == ["Haircut", "Massage"]


def test_inactive_and_deleted_services_hidden(db, business, make_service):
    active = make_service(business, name="Active")
    paused = make_service(business, name="Paused")
    removed = make_service(business, name="Removed")

    catalog.update_service(db, paused.id, ServiceUpdate(is_active=False))
    catalog.delete_service(db, removed.id)

    items, _ = catalog.list_services(db, business.id)
    assert [s.id for s in items] == [active.id]

    items, _ = catalog.list_services(db, business.id, include_inactive=True)
    assert [s.id for s in items] == [active.id, paused.id]

    with pytest.raises(NotFoundError):
        catalog.get_service(db, removed.id)


def test_service_for_unknown_business(db, make_service, business):
    catalog.delete_business(db, business.id)

    with pytest.raises(NotFoundError):
        make_service(business)
