from pydantic import BaseModel, Field, field_validator
from typing import Optional
from decimal import Decimal
from datetime import date, datetime

class InventoryItemBase(BaseModel):
    name: str = Field(..., min_length=1)
    category: Optional[str] = None  # e.g. "Puja Samagri", "Prasadam", "Books"
    unit: str = "PCS"
    min_stock_level: Decimal = Field(Decimal("0"), ge=0)
    unit_cost: Decimal = Field(Decimal("0"), ge=0)
    is_perishable: bool = False
    expiry_date: Optional[date] = None
    description: Optional[str] = None

class InventoryItemCreate(InventoryItemBase):
    current_stock: Decimal = Field(Decimal("0"), ge=0)

class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    unit: Optional[str] = None
    # current_stock is changed through stock adjustments only
    min_stock_level: Optional[Decimal] = Field(None, ge=0)
    unit_cost: Optional[Decimal] = Field(None, ge=0)
    is_perishable: Optional[bool] = None
    expiry_date: Optional[date] = None
    description: Optional[str] = None

class StockAdjustment(BaseModel):
    direction: str  # "in" or "out"
    quantity: Decimal = Field(..., gt=0)
    reason: Optional[str] = None

    @field_validator('direction')
    @classmethod
    def validate_direction(cls, v):
        v = (v or "").lower()
        if v not in ("in", "out"):
            raise ValueError("direction must be 'in' or 'out'")
        return v

class InventoryItem(InventoryItemBase):
    id: int
    tenant_id: Optional[str] = None
    current_stock: Decimal
    is_low_stock: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
