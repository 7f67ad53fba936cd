from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict
from datetime import date, datetime
from decimal import Decimal

ACCOUNT_TYPES = ["Savings", "Current", "Fixed Deposit"]
TRANSACTION_TYPES = ["Credit", "Debit"]

class BankAccountBase(BaseModel):
    bank_name: str = Field(..., min_length=2)
    account_name: str = Field(..., min_length=2)
    account_number: str = Field(..., min_length=4, max_length=30)
    ifsc_code: Optional[str] = Field(None, pattern=r"^[A-Z]{4}0[A-Z0-9]{6}$")
    branch: Optional[str] = None
    account_type: str = "Savings"
    ledger_account_id: Optional[int] = None
    is_active: bool = True

    @field_validator('account_type')
    @classmethod
    def validate_account_type(cls, v):
        if v not in ACCOUNT_TYPES:
            raise ValueError(f"account_type must be one of {ACCOUNT_TYPES}")
        return v

class BankAccountCreate(BankAccountBase):
    opening_balance: Decimal = Decimal("0")

class BankAccountUpdate(BaseModel):
    bank_name: Optional[str] = None
    account_name: Optional[str] = None
    ifsc_code: Optional[str] = Field(None, pattern=r"^[A-Z]{4}0[A-Z0-9]{6}$")
    branch: Optional[str] = None
    ledger_account_id: Optional[int] = None
    is_active: Optional[bool] = None

class BankAccount(BankAccountBase):
    id: int
    tenant_id: str
    opening_balance: Decimal
    current_balance: Decimal
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BankTransactionCreate(BaseModel):
    transaction_date: date
    description: Optional[str] = None
    reference_number: Optional[str] = None
    transaction_type: str
    amount: Decimal = Field(..., gt=0)
    balance: Optional[Decimal] = None

    @field_validator('transaction_type')
    @classmethod
    def validate_transaction_type(cls, v):
        if v not in TRANSACTION_TYPES:
            raise ValueError(f"transaction_type must be one of {TRANSACTION_TYPES}")
        return v

class BankTransaction(BankTransactionCreate):
    id: int
    bank_account_id: int
    is_reconciled: bool
    reconciled_at: Optional[datetime] = None
    reconciled_by: Optional[str] = None
    ledger_entry_id: Optional[int] = None

    class Config:
        from_attributes = True

class ReconcileRequest(BaseModel):
    transaction_ids: List[int] = Field(..., min_length=1)
    # bank transaction id -> general ledger row id
    ledger_matches: Dict[int, int] = {}
    auto_match: bool = False

class ReconcileResult(BaseModel):
    reconciled: List[int]
    already_reconciled: List[int]
    matched: Dict[int, int]

class UnreconcileRequest(BaseModel):
    transaction_ids: List[int] = Field(..., min_length=1)

class StatementImportResult(BaseModel):
    imported: int
    skipped: int
    errors: List[str]
    current_balance: Decimal

class ReconciliationSummary(BaseModel):
    bank_account_id: int
    statement_balance: Decimal
    book_balance: Optional[Decimal] = None
    difference: Optional[Decimal] = None
    reconciled_count: int
    reconciled_credits: Decimal
    reconciled_debits: Decimal
    unreconciled_count: int
    unreconciled_credits: Decimal
    unreconciled_debits: Decimal
