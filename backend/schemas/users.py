from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

ROLES = ["admin", "user"]

class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: Optional[str] = None

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserProfile(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    tenant_id: str
    is_active: bool
    role: str
    devotee_id: Optional[int] = None
    created_at: Optional[datetime] = None

class RoleUpdate(BaseModel):
    role: str

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if v not in ROLES:
            raise ValueError(f"role must be one of {ROLES}")
        return v

class DevoteeLink(BaseModel):
    devotee_id: Optional[int] = None  # None unlinks

class MobileLinkRequest(BaseModel):
    mobile_number: str = Field(..., min_length=10, max_length=15)

class MobileLinkResult(BaseModel):
    linked: bool
    devotee_id: Optional[int] = None
