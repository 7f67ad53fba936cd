from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from decimal import Decimal
import re

def check_financial_year(v):
    match = re.match(r"^(\d{4})-(\d{2})$", v or "")
    if not match or (int(match.group(1)) + 1) % 100 != int(match.group(2)):
        raise ValueError("financial_year must look like 2024-25")
    return v

class BudgetBase(BaseModel):
    financial_year: str
    account_id: int
    budgeted_amount: Decimal = Field(..., ge=0)
    notes: Optional[str] = None

    @field_validator('financial_year')
    @classmethod
    def validate_financial_year(cls, v):
        return check_financial_year(v)

class BudgetCreate(BudgetBase):
    pass

class BudgetUpdate(BaseModel):
    budgeted_amount: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None

class Budget(BudgetBase):
    id: int
    tenant_id: str

    class Config:
        from_attributes = True

class BudgetVarianceRow(BaseModel):
    budget_id: int
    account_id: int
    account_code: str
    account_name: str
    account_type: str
    budgeted_amount: Decimal
    actual_amount: Decimal
    variance: Decimal
    utilisation_percent: Decimal

class BudgetVarianceReport(BaseModel):
    financial_year: str
    rows: List[BudgetVarianceRow]
    total_budgeted: Decimal
    total_actual: Decimal
    total_variance: Decimal
