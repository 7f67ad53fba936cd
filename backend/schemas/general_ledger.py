from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date
from decimal import Decimal

class LedgerLine(BaseModel):
    """One side of a posting, before it is written to the general ledger."""
    account_id: int
    debit_amount: Decimal = Field(Decimal("0"), ge=0)
    credit_amount: Decimal = Field(Decimal("0"), ge=0)
    description: Optional[str] = None
    is_gst_applicable: bool = False
    gst_rate: Optional[Decimal] = None
    gst_amount: Optional[Decimal] = None

class GeneralLedgerEntry(BaseModel):
    id: int
    account_id: int
    financial_period_id: int
    transaction_date: date
    description: Optional[str] = None
    reference_type: str
    reference_id: int
    debit_amount: Decimal
    credit_amount: Decimal
    balance: Decimal
    is_gst_applicable: bool
    gst_rate: Optional[Decimal] = None
    gst_amount: Optional[Decimal] = None
    account_code: Optional[str] = None
    account_name: Optional[str] = None

    class Config:
        from_attributes = True

class LedgerView(BaseModel):
    account_id: Optional[int] = None
    account_code: Optional[str] = None
    account_name: Optional[str] = None
    account_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    opening_balance: Optional[Decimal] = None
    closing_balance: Optional[Decimal] = None
    total_debits: Decimal
    total_credits: Decimal
    entries: List[GeneralLedgerEntry]
