from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional

class JournalEntryLineBase(BaseModel):
    account_id: int
    description: Optional[str] = None
    debit_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    credit_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)

class JournalEntryLineCreate(JournalEntryLineBase):
    pass

class JournalEntryLine(JournalEntryLineBase):
    id: int
    journal_entry_id: int
    line_number: int

    class Config:
        from_attributes = True
