"""
Thread races on one slot. Each racer runs in its own thread with its own
session against the same SQLite file, like concurrent API requests.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from app.models import Bookings, Customers
from app.services import allocator, slot_store
from app.services.errors import SlotFullError


def race(session_factory, racers, book):
    """Run book(session, n) in `racers` threads released together."""
    barrier = threading.Barrier(racers)

    def attempt(n):
        session = session_factory()
        try:
            barrier.wait(timeout=10)
            book(session, n)
            return "ok"
        except SlotFullError:
            return "full"
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=racers) as pool:
        return list(pool.map(attempt, range(racers)))


@pytest.mark.parametrize("strategy", ["pessimistic", "optimistic"])
def test_exactly_one_winner_for_last_unit(session_factory, db, business, service, slot, make_customer, strategy):
    def book(session, n):
        allocator.create_booking(
            session, business.id, service.id, slot.id, make_customer(n), strategy=strategy
        )

    results = race(session_factory, 10, book)

    assert results.count("ok") == 1
    assert results.count("full") == 9

    fresh = slot_store.get_slot(db, slot.id)
    assert fresh.booked_count == 1
    assert fresh.is_booked is True
    assert db.scalar(select(func.count()).select_from(Bookings)) == 1


@pytest.mark.parametrize("strategy", ["pessimistic", "optimistic"])
def test_never_more_winners_than_capacity(session_factory, db, business, service, make_slot, make_customer, strategy):
    slot = make_slot(business, capacity=3)

    def book(session, n):
        allocator.create_booking(
            session, business.id, service.id, slot.id, make_customer(n), strategy=strategy
        )

    results = race(session_factory, 8, book)

    assert results.count("ok") == 3
    fresh = slot_store.get_slot(db, slot.id)
    assert fresh.booked_count == 3
    assert fresh.is_booked is True


def test_same_customer_racing_creates_one_customer(session_factory, db, business, service, make_slot, make_customer):
    slot = make_slot(business, capacity=5)

    def book(session, n):
        allocator.create_booking(session, business.id, service.id, slot.id, make_customer(1))

    results = race(session_factory, 5, book)

    assert results.count("ok") == 5
    assert db.scalar(select(func.count()).select_from(Customers)) == 1


def test_cancel_and_rebook_race_keeps_count_consistent(session_factory, db, business, service, make_slot, make_customer):
    slot = make_slot(business, capacity=2)
    holder = allocator.create_booking(db, business.id, service.id, slot.id, make_customer(0))
    # the booking expired the cached slot; read ids now and end the
    # session's transaction so it does not hold the SQLite write lock
    holder_id, business_id, service_id, slot_id = holder.id, business.id, service.id, slot.id
    db.rollback()

    def book(session, n):
        if n == 0:
            allocator.cancel_booking(session, holder_id)
        else:
            allocator.create_booking(session, business_id, service_id, slot_id, make_customer(n))

    results = race(session_factory, 4, book)

    winners = results[1:].count("ok")
    assert 1 <= winners <= 2
    fresh = slot_store.get_slot(db, slot_id)
    active = db.scalar(
        select(func.count()).select_from(Bookings).where(
            Bookings.slot_id == slot_id, Bookings.status != "CANCELLED"
        )
    )
    assert fresh.booked_count == active == winners


def test_max_bookings_two_scenario(db, make_business, make_service, make_slot, make_customer):
    """Business allows two per slot: third is refused until someone cancels."""
    business = make_business(max_bookings=2)
    service = make_service(business)
    slot = make_slot(business)
    assert slot.capacity == 2

    first = allocator.create_booking(db, business.id, service.id, slot.id, make_customer(1))
    allocator.create_booking(db, business.id, service.id, slot.id, make_customer(2))
    with pytest.raises(SlotFullError):
        allocator.create_booking(db, business.id, service.id, slot.id, make_customer(3))

    allocator.cancel_booking(db, first.id)
    allocator.create_booking(db, business.id, service.id, slot.id, make_customer(3))

    fresh = slot_store.get_slot(db, slot.id)
    assert fresh.booked_count == 2
    assert fresh.is_booked is True


@pytest.mark.parametrize("strategy", ["pessimistic", "optimistic"])
def test_slot_filled_after_read_rolls_back(session_factory, db, business, service, slot, make_customer, strategy):
    """The read saw room, but the slot filled before the increment: nothing is kept."""
    reader = session_factory()
    stale = slot_store.get_slot(reader, slot.id)
    reader.close()
    assert stale.booked_count == 0

    allocator.create_booking(db, business.id, service.id, slot.id, make_customer(1))
    business_id, service_id, slot_id = business.id, service.id, slot.id

    with patch.object(slot_store, "get_slot", return_value=stale):
        with pytest.raises(SlotFullError):
            allocator.create_booking(
                db, business_id, service_id, slot_id, make_customer(2), strategy=strategy
            )

    assert db.scalar(select(func.count()).select_from(Bookings)) == 1
    assert db.scalar(select(func.count()).select_from(Customers)) == 1
    assert slot_store.get_slot(db, slot_id).booked_count == 1
