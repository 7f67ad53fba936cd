from pydantic import BaseModel, Field, field_validator
from typing import Optional
from decimal import Decimal
from datetime import date
from schemas.devotees import Devotee
from schemas.masters import Puja

BOOKING_STATUSES = ["Pending", "Confirmed", "Completed", "Cancelled"]

def check_booking_status(v):
    if v is not None and v not in BOOKING_STATUSES:
        raise ValueError(f"status must be one of {BOOKING_STATUSES}")
    return v

class PujaBookingBase(BaseModel):
    devotee_id: int
    puja_id: int
    booking_date: date
    puja_date: date
    time_slot: Optional[str] = None
    special_instructions: Optional[str] = None

class PujaBookingCreate(PujaBookingBase):
    amount: Optional[Decimal] = Field(None, ge=0)  # defaults to the puja's base amount
    amount_paid: Decimal = Field(Decimal("0"), ge=0)
    status: str = "Pending"

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        return check_booking_status(v)

class PujaBookingUpdate(BaseModel):
    puja_date: Optional[date] = None
    time_slot: Optional[str] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    amount_paid: Optional[Decimal] = Field(None, ge=0)
    status: Optional[str] = None
    refunded: Optional[bool] = None
    special_instructions: Optional[str] = None

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        return check_booking_status(v)

class PujaBooking(PujaBookingBase):
    id: int
    tenant_id: str
    amount: Decimal
    amount_paid: Decimal
    status: str
    payment_status: str
    devotee: Optional[Devotee] = None
    puja: Optional[Puja] = None

    class Config:
        from_attributes = True
