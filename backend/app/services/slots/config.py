# backend/app/services/slots/config.py
"""
Slot generation configuration and time helpers.
"""

from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class GeneratorConfig:
    """
    Limits for one generation request.

    Attributes:
        max_range_days: Longest [start_date, end_date] span accepted
        max_slots: Upper bound on rows inserted by a single request
        min_duration_minutes: Shortest slot that may be generated
    """
    max_range_days: int = 366
    max_slots: int = 10000
    min_duration_minutes: int = 5

    def __post_init__(self):
        """Validate configuration."""
        if self.max_range_days < 1:
            raise ValueError(f"max_range_days must be positive, got {self.max_range_days}")
        if self.min_duration_minutes < 1:
            raise ValueError(f"min_duration_minutes must be positive, got {self.min_duration_minutes}")


@lru_cache
def get_generator_config() -> GeneratorConfig:
    """Generator configuration (singleton)."""
    return GeneratorConfig()


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)


def parse_date(value: str) -> date:
    """Parse "YYYY-MM-DD"; raises ValueError on anything else."""
    return datetime.strptime(value.strip(), DATE_FORMAT).date()
