from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

EVENT_STATUSES = ["Planned", "Confirmed", "In Progress", "Completed", "Cancelled"]
SLUG_PATTERN = r"^[a-z0-9-]+$"

def check_event_status(v):
    if v is not None and v not in EVENT_STATUSES:
        raise ValueError(f"status must be one of {EVENT_STATUSES}")
    return v

class TempleEventBase(BaseModel):
    name: str = Field(..., min_length=2)
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    location: Optional[str] = None
    status: str = "Planned"
    is_published: bool = False

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        return check_event_status(v)

class TempleEventCreate(TempleEventBase):
    slug: Optional[str] = Field(None, pattern=SLUG_PATTERN)

class TempleEventUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    slug: Optional[str] = Field(None, pattern=SLUG_PATTERN)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    location: Optional[str] = None
    status: Optional[str] = None
    is_published: Optional[bool] = None

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        return check_event_status(v)

class TempleEvent(TempleEventBase):
    id: int
    tenant_id: str
    slug: str

    class Config:
        from_attributes = True

class PublicEvent(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    location: Optional[str] = None

    class Config:
        from_attributes = True

class TrackScanRequest(BaseModel):
    session_id: Optional[str] = None
    user_agent: Optional[str] = None

class EventRegistrationForm(BaseModel):
    name: str = Field(..., min_length=2)
    phone: str = Field(..., min_length=10)
    email: Optional[EmailStr] = None
    dob: date
    occupation: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)

    @field_validator('name', 'phone', 'occupation', 'city', 'state', mode='before')
    @classmethod
    def strip_text(cls, v):
        # Length limits apply to the trimmed value
        return v.strip() if isinstance(v, str) else v

    @field_validator('email', mode='before')
    @classmethod
    def blank_email_is_none(cls, v):
        return v or None

class EventRegistrationResponse(BaseModel):
    success: bool
    message: str
    devotee_id: int

class RecentRegistration(BaseModel):
    id: int
    devotee_code: str
    full_name: str
    mobile_number: str
    city: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class EventAnalytics(BaseModel):
    event_id: int
    event_name: str
    slug: str
    total_scans: int
    total_submissions: int
    conversion_rate: Decimal
    registration_url: str
    qr_code_data: str
    recent_registrations: List[RecentRegistration]
