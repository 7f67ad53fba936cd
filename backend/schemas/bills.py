from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from models.bills import DocumentPaymentStatus

PAYMENT_MODES = ["Cash", "Cheque", "Online Transfer", "UPI", "Card", "DD"]

def check_payment_mode(v):
    if v is not None and v not in PAYMENT_MODES:
        raise ValueError(f"payment_mode must be one of {PAYMENT_MODES}")
    return v

class BillBase(BaseModel):
    vendor_id: int
    vendor_bill_number: Optional[str] = None
    expense_account_id: Optional[int] = None
    bill_date: date
    due_date: Optional[date] = None
    subtotal: Decimal = Field(..., ge=Decimal("0.01"))
    gst_rate: Decimal = Field(Decimal("0"), ge=0, le=100)
    notes: Optional[str] = None
    bill_attachment: Optional[str] = None

class BillCreate(BillBase):
    pass

class BillUpdate(BaseModel):
    vendor_bill_number: Optional[str] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None
    bill_attachment: Optional[str] = None

class PaymentBase(BaseModel):
    payment_date: date
    amount: Decimal = Field(..., gt=0)
    payment_mode: str
    bank_account_id: Optional[int] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('payment_mode')
    @classmethod
    def validate_payment_mode(cls, v):
        return check_payment_mode(v)

class BillPaymentCreate(PaymentBase):
    pass

class BillPayment(PaymentBase):
    id: int
    bill_id: int
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    class Config:
        from_attributes = True

class Bill(BillBase):
    id: int
    tenant_id: str
    bill_number: str
    expense_account_id: int
    gst_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    status: DocumentPaymentStatus
    vendor_name: Optional[str] = None
    payments: List[BillPayment] = []
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    class Config:
        from_attributes = True
