# backend/app/schemas/services.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ServiceCreate(BaseModel):
    business_id: int
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    duration_min: int = Field(..., gt=0)
    total_price: float = Field(..., ge=0)
    # deposit <= total_price is not enforced
    deposit_amount: float = Field(0, ge=0)
    max_capacity: Optional[int] = Field(None, ge=1)

    model_config = {"from_attributes": True}


class ServiceUpdate(BaseModel):
    is_active: Optional[bool] = None
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    duration_min: Optional[int] = Field(None, gt=0)
    total_price: Optional[float] = Field(None, ge=0)
    deposit_amount: Optional[float] = Field(None, ge=0)
    max_capacity: Optional[int] = Field(None, ge=1)

    model_config = {"from_attributes": True}


class ServiceRead(BaseModel):
    id: int
    business_id: int
    name: str
    description: Optional[str] = None
    duration_min: int
    total_price: float
    deposit_amount: float
    max_capacity: Optional[int] = None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ServiceList(BaseModel):
    items: list[ServiceRead]
    total: int
    offset: int
    limit: int
