from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import AuditMixin

class DocumentPaymentStatus(enum.Enum):
    UNPAID = "Unpaid"
    PARTIAL = "Partial"
    PAID = "Paid"

class Bill(Base, AuditMixin):
    __tablename__ = "bills"
    __table_args__ = (UniqueConstraint('tenant_id', 'bill_number', name='_tenant_bill_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    bill_number = Column(String(30), nullable=False, index=True)
    vendor_bill_number = Column(String, nullable=True)  # number printed on the vendor's bill
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False)
    expense_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=False)
    bill_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    subtotal = Column(Numeric(14, 2), nullable=False)
    gst_rate = Column(Numeric(5, 2), default=0, nullable=False)
    gst_amount = Column(Numeric(14, 2), default=0, nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=False)
    paid_amount = Column(Numeric(14, 2), default=0, nullable=False)
    status = Column(Enum(DocumentPaymentStatus), default=DocumentPaymentStatus.UNPAID, nullable=False)
    notes = Column(Text, nullable=True)
    bill_attachment = Column(String(500), nullable=True)

    # Relationships
    vendor = relationship("Vendor", back_populates="bills")
    expense_account = relationship("ChartOfAccounts")
    payments = relationship("BillPayment", back_populates="bill", cascade="all, delete-orphan")

    @property
    def vendor_name(self):
        return self.vendor.vendor_name if self.vendor else None


class BillPayment(Base, AuditMixin):
    __tablename__ = "bill_payments"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False)
    payment_date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    payment_mode = Column(String, nullable=False)  # Cash, Cheque, Online Transfer, UPI, Card, DD
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    reference_number = Column(String, nullable=True)  # cheque number, UTR etc.
    notes = Column(Text, nullable=True)

    # Relationships
    bill = relationship("Bill", back_populates="payments")
    bank_account = relationship("BankAccount")
