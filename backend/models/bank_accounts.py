from sqlalchemy import Column, Integer, String, Text, Numeric, Date, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin, TimestampMixin

class BankAccount(Base, AuditMixin):
    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    bank_name = Column(String, nullable=False)
    account_name = Column(String, nullable=False)
    account_number = Column(String(30), nullable=False)
    ifsc_code = Column(String(11), nullable=True)
    branch = Column(String, nullable=True)
    account_type = Column(String(20), nullable=False, default="Savings")  # Savings, Current, Fixed Deposit
    opening_balance = Column(Numeric(14, 2), default=0, nullable=False)
    current_balance = Column(Numeric(14, 2), default=0, nullable=False)
    ledger_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    ledger_account = relationship("ChartOfAccounts")
    transactions = relationship("BankTransaction", back_populates="bank_account")


class BankTransaction(Base, TimestampMixin):
    """A line from the bank statement, matched against the books during reconciliation."""
    __tablename__ = "bank_transactions"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False, index=True)
    transaction_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    reference_number = Column(String, nullable=True)
    transaction_type = Column(String(10), nullable=False)  # Credit, Debit
    amount = Column(Numeric(14, 2), nullable=False)
    balance = Column(Numeric(14, 2), nullable=True)  # statement running balance, if provided
    is_reconciled = Column(Boolean, default=False, nullable=False)
    reconciled_at = Column(DateTime(timezone=True), nullable=True)
    reconciled_by = Column(String, nullable=True)
    ledger_entry_id = Column(Integer, ForeignKey("general_ledger.id"), nullable=True)

    # Relationships
    bank_account = relationship("BankAccount", back_populates="transactions")
    ledger_entry = relationship("GeneralLedger")
