from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from models.donations import DonationPaymentStatus
from schemas.bills import check_payment_mode

class DonationBase(BaseModel):
    devotee_id: Optional[int] = None
    donor_name: Optional[str] = None
    category_id: Optional[int] = None
    amount: Decimal = Field(..., ge=1, decimal_places=2)
    donation_date: date
    payment_mode: str
    bank_account_id: Optional[int] = None
    transaction_reference: Optional[str] = None
    purpose: Optional[str] = None
    pan_number: Optional[str] = Field(None, pattern=r"^[A-Z]{5}[0-9]{4}[A-Z]$")

    @field_validator('payment_mode')
    @classmethod
    def validate_payment_mode(cls, v):
        return check_payment_mode(v)

class DonationCreate(DonationBase):
    payment_status: DonationPaymentStatus = DonationPaymentStatus.COMPLETED

    @model_validator(mode='after')
    def check_donor(self):
        if not self.devotee_id and not (self.donor_name and self.donor_name.strip()):
            raise ValueError("Either devotee_id or donor_name is required")
        if self.payment_status == DonationPaymentStatus.REFUNDED:
            raise ValueError("A donation cannot be created as Refunded")
        return self

class DonationUpdate(BaseModel):
    """Descriptive fields only; amounts and status change through the status endpoint."""
    donor_name: Optional[str] = None
    category_id: Optional[int] = None
    transaction_reference: Optional[str] = None
    purpose: Optional[str] = None
    pan_number: Optional[str] = Field(None, pattern=r"^[A-Z]{5}[0-9]{4}[A-Z]$")

class DonationStatusUpdate(BaseModel):
    payment_status: DonationPaymentStatus
    status_date: Optional[date] = None
    transaction_reference: Optional[str] = None

class Donation(DonationBase):
    id: int
    tenant_id: str
    receipt_number: str
    payment_status: DonationPaymentStatus
    is_80g_eligible: bool
    is_posted: bool
    receipt_s3_path: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    class Config:
        from_attributes = True

class DonationSummary(BaseModel):
    total_amount: Decimal
    donation_count: int
    eligible_80g_amount: Decimal
