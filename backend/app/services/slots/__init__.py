# backend/app/services/slots/__init__.py
"""
Slot generation module.

calculator: pure tiling of open windows into fixed-length slots
generator: weekly template / recurring schedule → persisted Slots
"""

from .calculator import tile_range, tile_window
from .config import GeneratorConfig, get_generator_config
from .generator import (
    create_recurring_schedule,
    delete_recurring_schedule,
    generate_slots,
    generate_slots_from_schedule,
    get_weekly_availability,
    list_recurring_schedules,
    set_weekly_availability,
)

__all__ = [
    "GeneratorConfig",
    "get_generator_config",
    "tile_window",
    "tile_range",
    "generate_slots",
    "generate_slots_from_schedule",
    "get_weekly_availability",
    "set_weekly_availability",
    "create_recurring_schedule",
    "list_recurring_schedules",
    "delete_recurring_schedule",
]
