# backend/app/schemas/availability.py
"""
Weekly availability template, recurring schedules and slot generation.
"""

import re
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

_HHMM = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def normalize_hhmm(v: str) -> str:
    """Validate "H:MM"/"HH:MM" and return zero-padded "HH:MM"."""
    m = _HHMM.match(v.strip())
    if not m:
        raise ValueError("Time must be in HH:MM format")
    return f"{int(m.group(1)):02d}:{m.group(2)}"


class DayAvailability(BaseModel):
    """One day of the weekly template. day_of_week: 0 = Monday, 6 = Sunday."""
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_closed: bool = False

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        return normalize_hhmm(v) if v is not None else None

    model_config = {"from_attributes": True}


class DayAvailabilityRead(DayAvailability):
    id: int
    business_id: int


class GenerateSlotsRequest(BaseModel):
    """Dates stay plain strings: the generator parses them before touching the DB."""
    start_date: str = Field(description="Date in YYYY-MM-DD format")
    end_date: str = Field(description="Date in YYYY-MM-DD format")
    duration_min: Optional[int] = Field(None, description="Defaults to business slot_duration_min")


class RecurringScheduleCreate(BaseModel):
    name: str = Field(..., min_length=1)
    days_of_week: list[int] = Field(..., min_length=1, max_length=7)
    start_time: str
    end_time: str
    start_date: date
    end_date: date
    exclude_dates: list[date] = []

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return normalize_hhmm(v)

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v: list[int]) -> list[int]:
        if any(d < 0 or d > 6 for d in v):
            raise ValueError("days_of_week values must be between 0 and 6")
        return sorted(set(v))

    @model_validator(mode="after")
    def check_ranges(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class RecurringScheduleRead(BaseModel):
    id: int
    business_id: int
    name: str
    days_of_week: list[int]
    start_time: str
    end_time: str
    start_date: date
    end_date: date
    exclude_dates: list[date]
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ScheduleGenerateRequest(BaseModel):
    duration_min: Optional[int] = Field(None, gt=0)
    # optional sub-range of the schedule's active range
    start_date: Optional[date] = None
    end_date: Optional[date] = None
