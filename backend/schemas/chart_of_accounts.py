from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

VALID_ACCOUNT_TYPES = ["Asset", "Liability", "Equity", "Income", "Expense"]

def _check_account_type(v):
    if v is not None and v not in VALID_ACCOUNT_TYPES:
        raise ValueError(f"account_type must be one of {VALID_ACCOUNT_TYPES}")
    return v

class ChartOfAccountsBase(BaseModel):
    account_code: str = Field(..., min_length=1, max_length=20)
    account_name: str = Field(..., min_length=1, max_length=100)
    account_type: str  # Asset, Liability, Equity, Income, Expense
    description: Optional[str] = None
    parent_account_id: Optional[int] = None
    is_gst_applicable: bool = False
    gst_rate: Decimal = Field(Decimal("0"), ge=0, le=100)
    is_active: bool = True

    @field_validator('account_type')
    @classmethod
    def validate_account_type(cls, v):
        return _check_account_type(v)

class ChartOfAccountsCreate(ChartOfAccountsBase):
    opening_balance: Decimal = Decimal("0")

class ChartOfAccountsUpdate(BaseModel):
    account_name: Optional[str] = None
    account_type: Optional[str] = None
    description: Optional[str] = None
    parent_account_id: Optional[int] = None
    is_gst_applicable: Optional[bool] = None
    gst_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    is_active: Optional[bool] = None

    @field_validator('account_type')
    @classmethod
    def validate_account_type(cls, v):
        return _check_account_type(v)

class ChartOfAccounts(ChartOfAccountsBase):
    id: int
    tenant_id: str
    opening_balance: Decimal
    current_balance: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ChartOfAccountsNode(ChartOfAccounts):
    children: List["ChartOfAccountsNode"] = []

ChartOfAccountsNode.model_rebuild()
