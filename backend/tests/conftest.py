"""Shared test fixtures for the booking backend.

Every test gets its own SQLite file so thread-race tests see real
cross-connection locking. Redis is never contacted: the event emitter is
patched out and rate limiting is disabled.
"""

import os
import tempfile

os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{os.path.join(tempfile.gettempdir(), 'slotbook-test.db')}"
)
os.environ.setdefault("REDIS_URL", "redis://localhost:6399/15")
os.environ["RATE_LIMIT_ENABLED"] = "false"

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.database import build_engine, get_db
from app.main import app
from app.models import Base
from app.schemas.bookings import CustomerDetails
from app.schemas.businesses import BusinessCreate
from app.schemas.services import ServiceCreate
from app.schemas.slots import SlotCreate
from app.services import catalog, slot_store

SLOT_START = datetime(2026, 3, 2, 10, 0)  # a Monday


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
def db(session_factory):
    """Direct DB session for test setup/assertions."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """HTTP test client bound to the per-test database."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def emitted():
    """Captured notification events, nothing reaches Redis."""
    with patch("app.services.notifications.emit_event", return_value=True) as mock:
        yield mock


# ── Factories ────────────────────────────────────────────────────────────

@pytest.fixture
def make_business(db):
    counter = {"n": 0}

    def _make(**kwargs):
        counter["n"] += 1
        data = {
            "name": f"Studio {counter['n']}",
            "vertical": "beauty",
            "slug": f"studio-{counter['n']}",
            "slot_duration_min": 60,
            "max_bookings": 1,
        }
        data.update(kwargs)
        return catalog.create_business(db, BusinessCreate(**data))

    return _make


@pytest.fixture
def make_service(db):
    def _make(business, **kwargs):
        data = {
            "business_id": business.id,
            "name": "Haircut",
            "duration_min": 60,
            "total_price": 50.0,
            "deposit_amount": 10.0,
        }
        data.update(kwargs)
        return catalog.create_service(db, ServiceCreate(**data))

    return _make


@pytest.fixture
def make_slot(db):
    def _make(business, start=SLOT_START, minutes=60, **kwargs):
        return slot_store.create_slot(db, SlotCreate(
            business_id=business.id,
            start_time=start,
            end_time=start + timedelta(minutes=minutes),
            **kwargs,
        ))

    return _make


@pytest.fixture
def business(make_business):
    return make_business()


@pytest.fixture
def service(make_service, business):
    return make_service(business)


@pytest.fixture
def slot(make_slot, business):
    return make_slot(business)


@pytest.fixture
def make_customer():
    def _make(n: int = 1) -> CustomerDetails:
        return CustomerDetails(
            name=f"Customer {n}",
            email=f"customer{n}@example.com",
            phone="+1 (555) 000-0000",
        )

    return _make
