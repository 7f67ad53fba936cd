from pydantic import BaseModel
from typing import Optional

class FinancialSettingsBase(BaseModel):
    default_cash_account_id: Optional[int] = None
    default_bank_account_id: Optional[int] = None
    default_accounts_receivable_account_id: Optional[int] = None
    default_gst_input_account_id: Optional[int] = None
    default_accounts_payable_account_id: Optional[int] = None
    default_gst_payable_account_id: Optional[int] = None
    default_donation_income_account_id: Optional[int] = None
    default_puja_income_account_id: Optional[int] = None
    default_gurukul_sales_account_id: Optional[int] = None
    default_other_income_account_id: Optional[int] = None
    default_general_expense_account_id: Optional[int] = None

class FinancialSettingsUpdate(FinancialSettingsBase):
    pass

class FinancialSettings(FinancialSettingsBase):
    tenant_id: str
    is_initialized: bool

    class Config:
        from_attributes = True

class DefaultAccount(BaseModel):
    setting: str
    expected_type: str
    account_id: Optional[int] = None
    account_code: Optional[str] = None
    account_name: Optional[str] = None
