# backend/app/schemas/bookings.py

import re
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class CustomerDetails(BaseModel):
    name: str = Field(..., min_length=1)
    email: str
    phone: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not _EMAIL.match(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, v: str) -> str:
        # keep leading +, drop formatting
        v = v.strip()
        digits = re.sub(r"\D", "", v)
        if len(digits) < 3:
            raise ValueError("Phone number must contain at least 3 digits")
        return "+" + digits if v.startswith("+") else digits


class CustomerRead(BaseModel):
    id: int
    business_id: int
    name: str
    email: str
    phone: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingCreate(BaseModel):
    business_id: int
    service_id: int
    slot_id: int
    customer: CustomerDetails
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingRead(BaseModel):
    id: int

    business_id: int
    service_id: int
    slot_id: int
    customer_id: Optional[int] = None

    customer_name: str
    customer_email: str
    customer_phone: str

    service_name: str
    slot_time: datetime
    deposit_paid: float
    total_price: float

    status: BookingStatus
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookingList(BaseModel):
    items: list[BookingRead]
    total: int
    offset: int
    limit: int


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    reason: Optional[str] = Field(None, description="Used when status is CANCELLED")


class BookingCancel(BaseModel):
    reason: Optional[str] = None


class BookingHistoryRead(BaseModel):
    id: int
    booking_id: int
    action: str
    previous_status: Optional[BookingStatus] = None
    new_status: BookingStatus
    performed_by: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
