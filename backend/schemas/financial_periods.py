from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import date

class FinancialPeriodBase(BaseModel):
    period_name: str = Field(..., min_length=1, max_length=50)
    start_date: date
    end_date: date

    @model_validator(mode='after')
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self

class FinancialPeriodCreate(FinancialPeriodBase):
    pass

class FinancialPeriodUpdate(BaseModel):
    period_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

class FinancialPeriod(FinancialPeriodBase):
    id: int
    tenant_id: str
    status: str

    class Config:
        from_attributes = True
