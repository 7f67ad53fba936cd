from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from models.expenses import ExpenseStatus
from schemas.bills import check_payment_mode

class ExpenseBase(BaseModel):
    expense_date: date
    expense_account_id: Optional[int] = None
    vendor_id: Optional[int] = None
    description: Optional[str] = None
    amount: Decimal = Field(..., ge=Decimal("0.01"))
    payment_mode: Optional[str] = None
    bank_account_id: Optional[int] = None
    reference_number: Optional[str] = None

    @field_validator('payment_mode')
    @classmethod
    def validate_payment_mode(cls, v):
        return check_payment_mode(v)

class ExpenseCreate(ExpenseBase):
    status: ExpenseStatus = ExpenseStatus.UNPAID
    paid_date: Optional[date] = None

class ExpenseUpdate(BaseModel):
    description: Optional[str] = None
    reference_number: Optional[str] = None
    vendor_id: Optional[int] = None

class ExpenseMarkPaid(BaseModel):
    paid_date: Optional[date] = None
    payment_mode: str = "Cash"
    bank_account_id: Optional[int] = None
    reference_number: Optional[str] = None

    @field_validator('payment_mode')
    @classmethod
    def validate_payment_mode(cls, v):
        return check_payment_mode(v)

class Expense(ExpenseBase):
    id: int
    tenant_id: str
    expense_number: str
    expense_account_id: int
    status: ExpenseStatus
    paid_date: Optional[date] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    class Config:
        from_attributes = True
