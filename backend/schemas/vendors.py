from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from models.vendors import VendorStatus

GSTIN_PATTERN = r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$"
PAN_PATTERN = r"^[A-Z]{5}[0-9]{4}[A-Z]$"

class VendorBase(BaseModel):
    vendor_code: str = Field(..., min_length=1, max_length=30)
    vendor_name: str = Field(..., min_length=2)
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    gstin: Optional[str] = Field(None, pattern=GSTIN_PATTERN)
    pan: Optional[str] = Field(None, pattern=PAN_PATTERN)
    payment_terms: Optional[str] = None
    status: Optional[VendorStatus] = VendorStatus.ACTIVE

class VendorCreate(VendorBase):
    pass

class VendorUpdate(BaseModel):
    vendor_name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    gstin: Optional[str] = Field(None, pattern=GSTIN_PATTERN)
    pan: Optional[str] = Field(None, pattern=PAN_PATTERN)
    payment_terms: Optional[str] = None
    status: Optional[VendorStatus] = None

class Vendor(VendorBase):
    id: int
    tenant_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
