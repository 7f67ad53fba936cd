from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, datetime

GENDERS = ["Male", "Female", "Other"]

class DevoteeBase(BaseModel):
    first_name: str = Field(..., min_length=2)
    last_name: Optional[str] = None
    mobile_number: str = Field(..., min_length=10, max_length=15)
    email: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: str = "India"
    pincode: Optional[str] = None
    gotra: Optional[str] = None
    nakshatra: Optional[str] = None
    rashi: Optional[str] = None
    occupation: Optional[str] = None
    membership_type: str = "General"
    membership_status: str = "Active"
    event_source: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('first_name', 'mobile_number')
    @classmethod
    def strip_required(cls, v):
        return v.strip() if v else v

    @field_validator('gender')
    @classmethod
    def validate_gender(cls, v):
        if v is not None and v not in GENDERS:
            raise ValueError(f"gender must be one of {GENDERS}")
        return v

class DevoteeCreate(DevoteeBase):
    pass

class DevoteeUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=2)
    last_name: Optional[str] = None
    mobile_number: Optional[str] = Field(None, min_length=10, max_length=15)
    email: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    pincode: Optional[str] = None
    gotra: Optional[str] = None
    nakshatra: Optional[str] = None
    rashi: Optional[str] = None
    occupation: Optional[str] = None
    membership_type: Optional[str] = None
    membership_status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('gender')
    @classmethod
    def validate_gender(cls, v):
        if v is not None and v not in GENDERS:
            raise ValueError(f"gender must be one of {GENDERS}")
        return v

class Devotee(DevoteeBase):
    id: int
    tenant_id: str
    devotee_code: str
    full_name: str
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    class Config:
        from_attributes = True

class DevoteeImportRow(BaseModel):
    row: int
    status: str  # Imported, Skipped
    devotee_code: Optional[str] = None
    error: Optional[str] = None

class DevoteeImportResult(BaseModel):
    imported: int
    skipped: int
    results: List[DevoteeImportRow]
