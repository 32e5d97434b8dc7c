# backend/app/services/slots/calculator.py
"""
Pure slot tiling, no database access.

A day's open window is cut into consecutive fixed-length slots starting
at opening time. A slot may end exactly at closing time; a trailing
remainder shorter than one slot is dropped, never emitted as a short slot.

    09:00-17:00, 90 min → 09:00, 10:30, 12:00, 13:30, 15:00 (16:30-17:00 dropped)
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from .config import time_str_to_minutes

Window = tuple[str, str]  # ("HH:MM", "HH:MM")


def tile_window(
    day: date,
    open_time: str,
    close_time: str,
    duration_min: int,
) -> list[tuple[datetime, datetime]]:
    """
    Cut one day's window into (start, end) pairs.

    Returns an empty list when the window is empty or inverted.
    """
    start_min = time_str_to_minutes(open_time)
    end_min = time_str_to_minutes(close_time)
    midnight = datetime.combine(day, datetime.min.time())

    slots: list[tuple[datetime, datetime]] = []
    t = start_min
    while t + duration_min <= end_min:
        slot_start = midnight + timedelta(minutes=t)
        slots.append((slot_start, slot_start + timedelta(minutes=duration_min)))
        t += duration_min

    return slots


def iter_days(start: date, end: date) -> Iterable[date]:
    """Calendar days in [start, end], inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def tile_range(
    start: date,
    end: date,
    duration_min: int,
    window_for_day,
) -> list[tuple[datetime, datetime]]:
    """
    Tile every day in [start, end].

    window_for_day(day) returns the ("HH:MM", "HH:MM") open window for the
    day, or None when the business is closed that day.
    """
    slots: list[tuple[datetime, datetime]] = []
    for day in iter_days(start, end):
        window: Optional[Window] = window_for_day(day)
        if not window:
            continue
        slots.extend(tile_window(day, window[0], window[1], duration_min))
    return slots


def weekly_window_lookup(template: dict[int, object]):
    """
    Build a window_for_day callback from a weekly template.

    template maps day_of_week (0 = Monday) to a row with start_time,
    end_time and is_closed. Missing days, closed days and rows without
    both times count as closed.
    """
    def window_for_day(day: date) -> Optional[Window]:
        row = template.get(day.weekday())
        if row is None or row.is_closed or not row.start_time or not row.end_time:
            return None
        return row.start_time, row.end_time

    return window_for_day
