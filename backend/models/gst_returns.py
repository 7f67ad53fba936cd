from sqlalchemy import Column, Integer, String, Text, Numeric, Date, UniqueConstraint
from database import Base
from models.audit_mixin import TimestampMixin

class GSTReturn(Base, TimestampMixin):
    __tablename__ = "gst_returns"
    __table_args__ = (UniqueConstraint('tenant_id', 'return_period', 'return_type', name='_tenant_gst_return_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    return_period = Column(String(7), nullable=False)  # "2024-09" (month) or "2024-25" (annual)
    return_type = Column(String(10), nullable=False)  # GSTR-1, GSTR-3B, GSTR-9
    total_taxable_value = Column(Numeric(14, 2), default=0, nullable=False)
    cgst_amount = Column(Numeric(14, 2), default=0, nullable=False)
    sgst_amount = Column(Numeric(14, 2), default=0, nullable=False)
    igst_amount = Column(Numeric(14, 2), default=0, nullable=False)
    total_tax = Column(Numeric(14, 2), default=0, nullable=False)
    filing_date = Column(Date, nullable=True)
    acknowledgement_number = Column(String, nullable=True)
    status = Column(String(10), nullable=False, default="Draft")  # Draft, Filed
    notes = Column(Text, nullable=True)
