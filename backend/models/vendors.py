from sqlalchemy import Column, Integer, String, Text, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import AuditMixin

class VendorStatus(enum.Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_HOLD = "On Hold"

class Vendor(Base, AuditMixin):
    __tablename__ = "vendors"
    __table_args__ = (UniqueConstraint('tenant_id', 'vendor_code', name='_tenant_vendor_code_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    vendor_code = Column(String(30), nullable=False)
    vendor_name = Column(String, nullable=False)
    contact_person = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    gstin = Column(String(15), nullable=True)
    pan = Column(String(10), nullable=True)
    payment_terms = Column(String, nullable=True)  # e.g. "Net 30"
    status = Column(Enum(VendorStatus), default=VendorStatus.ACTIVE, nullable=False)

    # Relationships
    bills = relationship("Bill", back_populates="vendor")
