from sqlalchemy import Column, Integer, String, Text, Numeric, Date, Boolean, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import AuditMixin

class DonationPaymentStatus(enum.Enum):
    COMPLETED = "Completed"
    PENDING = "Pending"
    FAILED = "Failed"
    REFUNDED = "Refunded"

class Donation(Base, AuditMixin):
    __tablename__ = "donations"
    __table_args__ = (UniqueConstraint('tenant_id', 'receipt_number', name='_tenant_donation_receipt_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    receipt_number = Column(String(20), nullable=False, index=True)  # DON-2024-0001
    devotee_id = Column(Integer, ForeignKey("devotees.id"), nullable=True)
    donor_name = Column(String, nullable=True)  # for walk-in donors without a devotee record
    category_id = Column(Integer, ForeignKey("master_donation_categories.id"), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    donation_date = Column(Date, nullable=False)
    payment_mode = Column(String, nullable=False)
    payment_status = Column(Enum(DonationPaymentStatus), default=DonationPaymentStatus.COMPLETED, nullable=False)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    transaction_reference = Column(String, nullable=True)
    purpose = Column(Text, nullable=True)
    is_80g_eligible = Column(Boolean, default=False, nullable=False)
    pan_number = Column(String(10), nullable=True)
    is_posted = Column(Boolean, default=False, nullable=False)
    receipt_s3_path = Column(String(500), nullable=True)

    # Relationships
    devotee = relationship("Devotee", back_populates="donations")
    category = relationship("MasterDonationCategory")
    bank_account = relationship("BankAccount")
