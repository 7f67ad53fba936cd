from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal

class MasterNameCreate(BaseModel):
    name: str = Field(..., min_length=1)

class MasterName(MasterNameCreate):
    id: int
    tenant_id: str
    is_active: bool

    class Config:
        from_attributes = True

class DonationCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    is_80g_eligible: bool = False

class DonationCategory(DonationCategoryCreate):
    id: int
    tenant_id: str
    is_active: bool

    class Config:
        from_attributes = True

class PujaCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    base_amount: Decimal = Field(Decimal("0"), ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)
    is_active: bool = True

class PujaUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    base_amount: Optional[Decimal] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None

class Puja(PujaCreate):
    id: int
    tenant_id: str

    class Config:
        from_attributes = True
