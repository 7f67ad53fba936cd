from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class Budget(Base, TimestampMixin):
    __tablename__ = "budgets"
    __table_args__ = (UniqueConstraint('tenant_id', 'financial_year', 'account_id', name='_tenant_budget_year_account_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    financial_year = Column(String(7), nullable=False)  # "2024-25"
    account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=False)
    budgeted_amount = Column(Numeric(14, 2), nullable=False)
    notes = Column(Text, nullable=True)

    account = relationship("ChartOfAccounts")
