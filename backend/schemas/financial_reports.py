from pydantic import BaseModel
from typing import List, Optional
from datetime import date
from decimal import Decimal
from schemas.general_ledger import GeneralLedgerEntry

class ReportLine(BaseModel):
    account_id: Optional[int] = None
    account_code: Optional[str] = None
    account_name: str
    amount: Decimal

class TrialBalanceRow(BaseModel):
    account_id: int
    account_code: str
    account_name: str
    account_type: str
    debit: Decimal
    credit: Decimal

class TrialBalance(BaseModel):
    as_of_date: Optional[date] = None
    rows: List[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    is_balanced: bool

class BalanceSheet(BaseModel):
    as_of_date: date
    assets: List[ReportLine]
    liabilities: List[ReportLine]
    equity: List[ReportLine]
    current_surplus: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    is_balanced: bool

class ProfitAndLoss(BaseModel):
    start_date: date
    end_date: date
    income: List[ReportLine]
    expenses: List[ReportLine]
    total_income: Decimal
    total_expenses: Decimal
    net_surplus: Decimal

class CashFlow(BaseModel):
    start_date: date
    end_date: date
    account_id: int
    account_code: str
    account_name: str
    opening_cash: Decimal
    inflows: Decimal
    outflows: Decimal
    net_change: Decimal
    closing_cash: Decimal
    entries: List[GeneralLedgerEntry]

class GSTRateSummary(BaseModel):
    gst_rate: Decimal
    taxable_value: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    total_tax: Decimal

class GSTReport(BaseModel):
    start_date: date
    end_date: date
    rates: List[GSTRateSummary]
    total_taxable_value: Decimal
    total_cgst: Decimal
    total_sgst: Decimal
    total_igst: Decimal
    total_tax: Decimal
