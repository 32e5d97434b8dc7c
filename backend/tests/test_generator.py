"""Slot tiling and availability generation."""

from datetime import date, datetime, time

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from app.models import Slots
from app.schemas.availability import DayAvailability, RecurringScheduleCreate
from app.services import slots as generator
from app.services.errors import BadRequestError, NotFoundError
from app.services.slots import GeneratorConfig, tile_window

MONDAY = date(2026, 3, 2)


def slot_count(db):
    return db.scalar(select(func.count()).select_from(Slots))


def open_monday(db, business, start="09:00", end="17:00"):
    generator.set_weekly_availability(db, business.id, [
        DayAvailability(day_of_week=0, start_time=start, end_time=end),
        DayAvailability(day_of_week=1, is_closed=True),
    ])


# ── calculator ───────────────────────────────────────────────────────────

def test_tile_window_drops_short_remainder():
    slots = tile_window(MONDAY, "09:00", "17:00", 90)

    assert [s.time() for s, _ in slots] == [
        time(9, 0), time(10, 30), time(12, 0), time(13, 30), time(15, 0),
    ]
    assert slots[-1][1].time() == time(16, 30)


def test_tile_window_keeps_slot_ending_at_close():
    slots = tile_window(MONDAY, "09:00", "17:00", 60)

    assert len(slots) == 8
    assert slots[-1][1] == datetime(2026, 3, 2, 17, 0)


def test_tile_window_empty_when_shorter_than_duration():
    assert tile_window(MONDAY, "09:00", "09:30", 60) == []


# ── weekly template ──────────────────────────────────────────────────────

def test_weekly_availability_upsert(db, business):
    open_monday(db, business)
    generator.set_weekly_availability(db, business.id, [
        DayAvailability(day_of_week=0, start_time="8:00", end_time="12:00"),
    ])

    days = generator.get_weekly_availability(db, business.id)
    assert [(d.day_of_week, d.start_time, d.end_time, d.is_closed) for d in days] == [
        (0, "08:00", "12:00", False),
        (1, None, None, True),
    ]


def test_open_day_needs_both_times(db, business):
    with pytest.raises(BadRequestError):
        generator.set_weekly_availability(db, business.id, [
            DayAvailability(day_of_week=2, start_time="09:00"),
        ])


def test_malformed_time_fails_validation():
    with pytest.raises(ValidationError):
        DayAvailability(day_of_week=0, start_time="25:00", end_time="26:00")


# ── generate_slots ───────────────────────────────────────────────────────

def test_generate_from_template(db, business):
    open_monday(db, business)

    slots = generator.generate_slots(db, business.id, "2026-03-02", "2026-03-02", 90)

    assert [s.start_time.time() for s in slots] == [
        time(9, 0), time(10, 30), time(12, 0), time(13, 30), time(15, 0),
    ]
    assert all(s.capacity == 1 and s.booked_count == 0 for s in slots)
    assert slot_count(db) == 5


def test_closed_and_missing_days_are_skipped(db, business):
    open_monday(db, business)

    slots = generator.generate_slots(db, business.id, "2026-03-02", "2026-03-08", 60)

    assert len(slots) == 8
    assert {s.start_time.date() for s in slots} == {MONDAY}


def test_duration_defaults_to_business_setting(db, make_business):
    business = make_business(slot_duration_min=120, max_bookings=3)
    open_monday(db, business)

    slots = generator.generate_slots(db, business.id, "2026-03-02", "2026-03-02")

    assert len(slots) == 4
    assert all(s.capacity == 3 for s in slots)


@pytest.mark.parametrize("start,end", [
    ("2026/03/02", "2026-03-02"),
    ("2026-03-02", "tomorrow"),
    ("2026-03-09", "2026-03-02"),
])
def test_bad_range_writes_nothing(db, business, start, end):
    open_monday(db, business)

    with pytest.raises(BadRequestError):
        generator.generate_slots(db, business.id, start, end, 60)

    assert slot_count(db) == 0


def test_range_and_slot_limits(db, business):
    open_monday(db, business)

    with pytest.raises(BadRequestError):
        generator.generate_slots(
            db, business.id, "2026-03-01", "2026-03-31", 60, config=GeneratorConfig(max_range_days=7)
        )
    with pytest.raises(BadRequestError):
        generator.generate_slots(
            db, business.id, "2026-03-02", "2026-03-02", 60, config=GeneratorConfig(max_slots=3)
        )
    with pytest.raises(BadRequestError):
        generator.generate_slots(db, business.id, "2026-03-02", "2026-03-02", 1)

    assert slot_count(db) == 0


def test_unknown_business(db):
    with pytest.raises(NotFoundError):
        generator.generate_slots(db, 999, "2026-03-02", "2026-03-02", 60)


# ── recurring schedules ──────────────────────────────────────────────────

def schedule_data(**kwargs):
    data = {
        "name": "Mornings",
        "days_of_week": [2, 0, 0],
        "start_time": "09:00",
        "end_time": "11:00",
        "start_date": date(2026, 3, 2),
        "end_date": date(2026, 3, 15),
        "exclude_dates": [date(2026, 3, 4)],
    }
    data.update(kwargs)
    return RecurringScheduleCreate(**data)


def test_schedule_days_are_normalized():
    assert schedule_data().days_of_week == [0, 2]


def test_schedule_rejects_inverted_times():
    with pytest.raises(ValidationError):
        schedule_data(start_time="11:00", end_time="09:00")


def test_generate_from_schedule_respects_days_and_exclusions(db, business):
    schedule = generator.create_recurring_schedule(db, business.id, schedule_data())

    slots = generator.generate_slots_from_schedule(db, business.id, schedule.id, 60)

    # Mondays 2nd and 9th, Wednesday 11th; Wednesday 4th is excluded
    assert sorted({s.start_time.date() for s in slots}) == [
        date(2026, 3, 2), date(2026, 3, 9), date(2026, 3, 11),
    ]
    assert len(slots) == 6


def test_generate_from_schedule_sub_range(db, business):
    schedule = generator.create_recurring_schedule(db, business.id, schedule_data())

    slots = generator.generate_slots_from_schedule(
        db, business.id, schedule.id, 60, start=date(2026, 3, 9), end=date(2026, 3, 9)
    )

    assert {s.start_time.date() for s in slots} == {date(2026, 3, 9)}


def test_deleted_schedule_cannot_generate(db, business):
    schedule = generator.create_recurring_schedule(db, business.id, schedule_data())
    generator.delete_recurring_schedule(db, business.id, schedule.id)

    assert generator.list_recurring_schedules(db, business.id) == []
    with pytest.raises(NotFoundError):
        generator.generate_slots_from_schedule(db, business.id, schedule.id, 60)


def test_schedule_of_other_business_is_not_found(db, make_business, business):
    other = make_business()
    schedule = generator.create_recurring_schedule(db, business.id, schedule_data())

    with pytest.raises(NotFoundError):
        generator.generate_slots_from_schedule(db, other.id, schedule.id, 60)
