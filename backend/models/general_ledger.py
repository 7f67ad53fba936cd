from sqlalchemy import Column, Integer, String, Date, Numeric, Boolean, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class GeneralLedger(Base, TimestampMixin):
    """One debit or credit line against a single account.

    Rows are append-only. `balance` is the account's running balance right
    after this row was posted.
    """
    __tablename__ = "general_ledger"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=False, index=True)
    financial_period_id = Column(Integer, ForeignKey("financial_periods.id"), nullable=False)
    transaction_date = Column(Date, nullable=False, index=True)
    description = Column(String, nullable=True)
    reference_type = Column(String(50), nullable=False)  # Donation, Bill, Bill Payment, Invoice, ...
    reference_id = Column(Integer, nullable=False)
    debit_amount = Column(Numeric(14, 2), nullable=False, default=0)
    credit_amount = Column(Numeric(14, 2), nullable=False, default=0)
    balance = Column(Numeric(14, 2), nullable=False)
    is_gst_applicable = Column(Boolean, default=False, nullable=False)
    gst_rate = Column(Numeric(5, 2), nullable=True)
    gst_amount = Column(Numeric(14, 2), nullable=True)

    account = relationship("ChartOfAccounts")
    financial_period = relationship("FinancialPeriod")

    @property
    def account_code(self):
        return self.account.account_code if self.account else None

    @property
    def account_name(self):
        return self.account.account_name if self.account else None

    __table_args__ = (
        CheckConstraint(
            '(debit_amount > 0 AND credit_amount = 0) OR (debit_amount = 0 AND credit_amount > 0)',
            name='check_ledger_single_side'
        ),
        Index('ix_general_ledger_reference', 'tenant_id', 'reference_type', 'reference_id'),
    )
