from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date
from decimal import Decimal

RETURN_TYPES = ["GSTR-1", "GSTR-3B", "GSTR-9"]

class GSTReturnBase(BaseModel):
    return_period: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    return_type: str
    total_taxable_value: Decimal = Field(Decimal("0"), ge=0)
    cgst_amount: Decimal = Field(Decimal("0"), ge=0)
    sgst_amount: Decimal = Field(Decimal("0"), ge=0)
    igst_amount: Decimal = Field(Decimal("0"), ge=0)
    filing_date: Optional[date] = None
    acknowledgement_number: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('return_type')
    @classmethod
    def validate_return_type(cls, v):
        if v not in RETURN_TYPES:
            raise ValueError(f"return_type must be one of {RETURN_TYPES}")
        return v

class GSTReturnUpsert(GSTReturnBase):
    pass

class GSTReturn(GSTReturnBase):
    id: int
    tenant_id: str
    total_tax: Decimal
    status: str

    class Config:
        from_attributes = True
