# backend/app/services/slots/generator.py
"""
Availability generator: materializes Slots from a weekly template or a
recurring schedule.

Runs ahead of time as an owner action; it is not part of the booking
path. No overlap check against existing slots is made: generating the
same range twice produces duplicates.

Input strings are parsed before any database access, so malformed dates
never leave partial writes behind.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ...models.generated import BusinessAvailability as DBAvailability
from ...models.generated import RecurringSchedules as DBSchedule
from ...models.generated import Slots as DBSlot
from ...schemas.availability import DayAvailability, RecurringScheduleCreate
from ..catalog import get_business
from ..errors import BadRequestError, NotFoundError
from ..slot_store import create_slots, resolve_capacity
from .calculator import tile_range, weekly_window_lookup
from .config import GeneratorConfig, get_generator_config, parse_date

logger = logging.getLogger(__name__)


# ── Weekly template ──────────────────────────────────────────────────────

def get_weekly_availability(db: Session, business_id: int) -> list[DBAvailability]:
    return list(
        db.scalars(
            select(DBAvailability)
            .where(DBAvailability.business_id == business_id)
            .order_by(DBAvailability.day_of_week)
        ).all()
    )


def _check_day(day: DayAvailability) -> None:
    if day.is_closed:
        return
    if not day.start_time or not day.end_time:
        raise BadRequestError(f"Day {day.day_of_week}: start_time and end_time are required unless closed")
    if day.end_time <= day.start_time:
        raise BadRequestError(f"Day {day.day_of_week}: end_time must be after start_time")


def set_weekly_availability(
    db: Session,
    business_id: int,
    days: list[DayAvailability],
) -> list[DBAvailability]:
    """Upsert the given days of the template; days not listed stay as they are."""
    get_business(db, business_id)
    for day in days:
        _check_day(day)

    existing = {a.day_of_week: a for a in get_weekly_availability(db, business_id)}
    for day in days:
        row = existing.get(day.day_of_week)
        if row is None:
            row = DBAvailability(business_id=business_id, day_of_week=day.day_of_week)
            db.add(row)
            existing[day.day_of_week] = row
        row.start_time = day.start_time
        row.end_time = day.end_time
        row.is_closed = day.is_closed

    db.commit()
    return get_weekly_availability(db, business_id)


# ── Generation ───────────────────────────────────────────────────────────

def _parse_range(
    start_date: str,
    end_date: str,
    config: GeneratorConfig,
) -> tuple[date, date]:
    try:
        start = parse_date(start_date)
        end = parse_date(end_date)
    except ValueError:
        raise BadRequestError("Dates must be in YYYY-MM-DD format")
    _check_range(start, end, config)
    return start, end


def _check_range(start: date, end: date, config: GeneratorConfig) -> None:
    if end < start:
        raise BadRequestError("end_date must not be before start_date")
    if (end - start).days + 1 > config.max_range_days:
        raise BadRequestError(f"Date range cannot exceed {config.max_range_days} days")


def _check_duration(duration_min: int, config: GeneratorConfig) -> None:
    if duration_min < config.min_duration_minutes:
        raise BadRequestError(f"duration_min must be at least {config.min_duration_minutes}")


def _materialize(
    db: Session,
    business,
    windows: list,
    config: GeneratorConfig,
    service_id: Optional[int] = None,
) -> list[DBSlot]:
    if len(windows) > config.max_slots:
        raise BadRequestError(
            f"Request would generate {len(windows)} slots, limit is {config.max_slots}"
        )

    capacity = resolve_capacity(business)
    slots = [
        DBSlot(
            business_id=business.id,
            service_id=service_id,
            start_time=start,
            end_time=end,
            capacity=capacity,
            booked_count=0,
            is_booked=False,
        )
        for start, end in windows
    ]
    return create_slots(db, slots)


def generate_slots(
    db: Session,
    business_id: int,
    start_date: str,
    end_date: str,
    duration_min: Optional[int] = None,
    config: GeneratorConfig | None = None,
) -> list[DBSlot]:
    """
    Generate slots for [start_date, end_date] from the weekly template.

    Args:
        start_date, end_date: "YYYY-MM-DD", inclusive
        duration_min: slot length, defaults to business.slot_duration_min

    Returns:
        The inserted slots, earliest first.
    """
    config = config or get_generator_config()

    # Step 1: parse and validate input, no DB yet
    start, end = _parse_range(start_date, end_date, config)
    if duration_min is not None:
        _check_duration(duration_min, config)

    # Step 2: business and its template
    business = get_business(db, business_id)
    duration = duration_min or business.slot_duration_min
    _check_duration(duration, config)

    template = {a.day_of_week: a for a in get_weekly_availability(db, business_id)}

    # Step 3: tile and insert
    windows = tile_range(start, end, duration, weekly_window_lookup(template))
    slots = _materialize(db, business, windows, config)

    logger.info(
        f"Generated {len(slots)} slots for business {business_id} "
        f"({start.isoformat()}..{end.isoformat()}, {duration} min)"
    )
    return slots


# ── Recurring schedules ──────────────────────────────────────────────────

def create_recurring_schedule(
    db: Session,
    business_id: int,
    data: RecurringScheduleCreate,
) -> DBSchedule:
    get_business(db, business_id)

    schedule = DBSchedule(
        business_id=business_id,
        name=data.name,
        days_of_week=list(data.days_of_week),
        start_time=data.start_time,
        end_time=data.end_time,
        start_date=data.start_date,
        end_date=data.end_date,
        exclude_dates=[d.isoformat() for d in data.exclude_dates],
        is_active=True,
    )
    db.add(schedule)
    db.commit()
    return schedule


def list_recurring_schedules(db: Session, business_id: int) -> list[DBSchedule]:
    return list(
        db.scalars(
            select(DBSchedule)
            .where(DBSchedule.business_id == business_id, DBSchedule.is_active.is_(True))
            .order_by(DBSchedule.id)
        ).all()
    )


def get_recurring_schedule(db: Session, business_id: int, schedule_id: int) -> DBSchedule:
    schedule = db.get(DBSchedule, schedule_id)
    if not schedule or schedule.business_id != business_id or not schedule.is_active:
        raise NotFoundError(f"Schedule {schedule_id} not found")
    return schedule


def delete_recurring_schedule(db: Session, business_id: int, schedule_id: int) -> None:
    """Deactivate a schedule. Slots already generated from it are kept."""
    schedule = get_recurring_schedule(db, business_id, schedule_id)
    schedule.is_active = False
    db.commit()


def generate_slots_from_schedule(
    db: Session,
    business_id: int,
    schedule_id: int,
    duration_min: Optional[int] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    config: GeneratorConfig | None = None,
) -> list[DBSlot]:
    """
    Materialize a recurring schedule.

    The range is the schedule's active range, optionally narrowed by
    start/end. Days outside days_of_week and excluded dates are skipped.
    """
    config = config or get_generator_config()
    if duration_min is not None:
        _check_duration(duration_min, config)

    schedule = get_recurring_schedule(db, business_id, schedule_id)
    business = get_business(db, business_id)

    range_start = max(schedule.start_date, start) if start else schedule.start_date
    range_end = min(schedule.end_date, end) if end else schedule.end_date
    if range_end < range_start:
        return []
    _check_range(range_start, range_end, config)

    duration = duration_min or business.slot_duration_min
    _check_duration(duration, config)

    days = set(schedule.days_of_week or [])
    excluded = {str(d)[:10] for d in (schedule.exclude_dates or [])}

    def window_for_day(day: date):
        if day.weekday() not in days or day.isoformat() in excluded:
            return None
        return schedule.start_time, schedule.end_time

    windows = tile_range(range_start, range_end, duration, window_for_day)
    slots = _materialize(db, business, windows, config)

    logger.info(
        f"Generated {len(slots)} slots for business {business_id} from schedule {schedule_id}"
    )
    return slots
