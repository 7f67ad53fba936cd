from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class ChartOfAccounts(Base, TimestampMixin):
    __tablename__ = "chart_of_accounts"

    id = Column(Integer, primary_key=True, index=True)
    account_code = Column(String(20), nullable=False, index=True)
    account_name = Column(String(100), nullable=False)
    account_type = Column(String(20), nullable=False)  # Asset, Liability, Equity, Income, Expense
    description = Column(Text, nullable=True)
    parent_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    is_gst_applicable = Column(Boolean, default=False, nullable=False)
    gst_rate = Column(Numeric(5, 2), default=0, nullable=False)
    opening_balance = Column(Numeric(14, 2), default=0, nullable=False)
    current_balance = Column(Numeric(14, 2), default=0, nullable=False)
    is_active = Column(Boolean, default=True)
    tenant_id = Column(String, index=True)

    parent = relationship("ChartOfAccounts", remote_side=[id], backref="children")

    __table_args__ = (
        UniqueConstraint('tenant_id', 'account_code', name='_tenant_account_code_uc'),
    )
