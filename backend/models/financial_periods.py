from sqlalchemy import Column, Integer, String, Date, UniqueConstraint, CheckConstraint
from database import Base
from models.audit_mixin import TimestampMixin

class FinancialPeriod(Base, TimestampMixin):
    __tablename__ = "financial_periods"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    period_name = Column(String(50), nullable=False)  # e.g. "FY 2024-25"
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(10), nullable=False, default="Open")  # Open, Closed

    __table_args__ = (
        UniqueConstraint('tenant_id', 'period_name', name='_tenant_period_name_uc'),
        CheckConstraint('start_date <= end_date', name='check_period_dates'),
    )
