from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from models.bills import DocumentPaymentStatus
from schemas.bills import PaymentBase
from schemas.vendors import GSTIN_PATTERN

class InvoiceBase(BaseModel):
    customer_name: str = Field(..., min_length=2)
    customer_gstin: Optional[str] = Field(None, pattern=GSTIN_PATTERN)
    devotee_id: Optional[int] = None
    income_account_id: Optional[int] = None
    invoice_date: date
    due_date: Optional[date] = None
    subtotal: Decimal = Field(..., ge=Decimal("0.01"))
    gst_rate: Decimal = Field(Decimal("0"), ge=0, le=100)
    notes: Optional[str] = None

class InvoiceCreate(InvoiceBase):
    pass

class InvoiceUpdate(BaseModel):
    customer_name: Optional[str] = None
    customer_gstin: Optional[str] = Field(None, pattern=GSTIN_PATTERN)
    due_date: Optional[date] = None
    notes: Optional[str] = None

class InvoicePaymentCreate(PaymentBase):
    pass

class InvoicePayment(PaymentBase):
    id: int
    invoice_id: int
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    class Config:
        from_attributes = True

class Invoice(InvoiceBase):
    id: int
    tenant_id: str
    invoice_number: str
    income_account_id: int
    gst_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    status: DocumentPaymentStatus
    payments: List[InvoicePayment] = []
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    class Config:
        from_attributes = True
