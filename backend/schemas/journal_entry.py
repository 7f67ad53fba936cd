from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from .journal_item import JournalEntryLineCreate, JournalEntryLine

class JournalEntryBase(BaseModel):
    entry_date: date
    description: Optional[str] = None
    reference_document: Optional[str] = None

class JournalEntryCreate(JournalEntryBase):
    lines: List[JournalEntryLineCreate]

    @field_validator('lines')
    @classmethod
    def check_debits_equal_credits(cls, lines):
        if len(lines) < 2:
            raise ValueError('A journal entry needs at least two lines.')
        for index, line in enumerate(lines, start=1):
            if (line.debit_amount > 0) == (line.credit_amount > 0):
                raise ValueError(f'Line {index} must have either a debit or a credit amount.')
        total_debit = sum((line.debit_amount for line in lines), Decimal("0"))
        total_credit = sum((line.credit_amount for line in lines), Decimal("0"))
        if abs(total_debit - total_credit) >= Decimal("0.01"):
            raise ValueError('The sum of debits must equal the sum of credits.')
        return lines

class JournalEntryReverse(BaseModel):
    reversal_date: Optional[date] = None
    reason: Optional[str] = None

class JournalEntry(JournalEntryBase):
    id: int
    tenant_id: str
    entry_number: str
    status: str
    posted_at: Optional[datetime] = None
    posted_by: Optional[str] = None
    reversal_of_id: Optional[int] = None
    lines: List[JournalEntryLine] = []

    class Config:
        from_attributes = True
