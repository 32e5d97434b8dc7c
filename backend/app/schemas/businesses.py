# backend/app/schemas/businesses.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BusinessCreate(BaseModel):
    name: str = Field(..., min_length=1)
    vertical: str = Field(..., min_length=1)
    slug: Optional[str] = Field(None, description="Subdomain key, generated from name if omitted")
    description: Optional[str] = None
    theme_color: str = "blue"
    slot_duration_min: int = Field(30, gt=0)
    max_bookings: int = Field(1, ge=1, description="Default capacity for new slots")

    model_config = {"from_attributes": True}


class BusinessUpdate(BaseModel):
    # slug is immutable after creation
    name: Optional[str] = Field(None, min_length=1)
    vertical: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    theme_color: Optional[str] = None
    slot_duration_min: Optional[int] = Field(None, gt=0)
    max_bookings: Optional[int] = Field(None, ge=1)

    model_config = {"from_attributes": True}


class BusinessRead(BaseModel):
    id: int
    slug: str
    name: str
    vertical: str
    description: Optional[str] = None
    theme_color: str
    slot_duration_min: int
    max_bookings: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
