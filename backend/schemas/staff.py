from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import date

class StaffBase(BaseModel):
    name: str = Field(..., min_length=2)
    role: str = "Pandit ji"
    mobile_number: Optional[str] = Field(None, min_length=10, max_length=15)
    email: Optional[str] = None
    address: Optional[str] = None
    joining_date: Optional[date] = None
    monthly_salary: Optional[Decimal] = Field(None, ge=0)
    is_active: bool = True

class StaffCreate(StaffBase):
    pass

class StaffUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    role: Optional[str] = None
    mobile_number: Optional[str] = Field(None, min_length=10, max_length=15)
    email: Optional[str] = None
    address: Optional[str] = None
    joining_date: Optional[date] = None
    monthly_salary: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None

class Staff(StaffBase):
    id: int
    tenant_id: str

    class Config:
        from_attributes = True
