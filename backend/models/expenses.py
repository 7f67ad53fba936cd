from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import AuditMixin

class ExpenseStatus(enum.Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"

class Expense(Base, AuditMixin):
    __tablename__ = "expenses"
    __table_args__ = (UniqueConstraint('tenant_id', 'expense_number', name='_tenant_expense_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    expense_number = Column(String(30), nullable=False, index=True)
    expense_date = Column(Date, nullable=False)
    expense_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=False)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=True)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(14, 2), nullable=False)
    payment_mode = Column(String, nullable=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    reference_number = Column(String, nullable=True)
    status = Column(Enum(ExpenseStatus), default=ExpenseStatus.UNPAID, nullable=False)
    paid_date = Column(Date, nullable=True)

    # Relationships
    expense_account = relationship("ChartOfAccounts")
    vendor = relationship("Vendor")
    bank_account = relationship("BankAccount")
