from sqlalchemy import Column, Integer, String, ForeignKey, Boolean
from database import Base
from models.audit_mixin import TimestampMixin

class FinancialSettings(Base, TimestampMixin):
    """Per-temple default accounts used when a document is posted to the ledger."""
    __tablename__ = "financial_settings"

    tenant_id = Column(String, primary_key=True, index=True)
    is_initialized = Column(Boolean, default=False, nullable=False)

    # Default Accounts
    default_cash_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    default_bank_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    default_accounts_receivable_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    default_gst_input_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    default_accounts_payable_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    default_gst_payable_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    default_donation_income_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    default_puja_income_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    default_gurukul_sales_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    default_other_income_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    default_general_expense_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
