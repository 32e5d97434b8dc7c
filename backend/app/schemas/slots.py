# backend/app/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class SlotCreate(BaseModel):
    business_id: int
    service_id: Optional[int] = None
    start_time: datetime
    end_time: datetime
    capacity: Optional[int] = Field(None, ge=1, description="Defaults to service or business capacity")

    @model_validator(mode="after")
    def check_time_order(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    model_config = {"from_attributes": True}


class SlotRead(BaseModel):
    """A concrete bookable window with its occupancy."""
    id: int
    business_id: int
    service_id: Optional[int] = None
    start_time: datetime
    end_time: datetime
    capacity: int
    booked_count: int
    is_booked: bool

    model_config = {"from_attributes": True}
