from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin
from models.bills import DocumentPaymentStatus

class Invoice(Base, AuditMixin):
    __tablename__ = "invoices"
    __table_args__ = (UniqueConstraint('tenant_id', 'invoice_number', name='_tenant_invoice_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    invoice_number = Column(String(30), nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    customer_gstin = Column(String(15), nullable=True)
    devotee_id = Column(Integer, ForeignKey("devotees.id"), nullable=True)
    income_account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=False)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    subtotal = Column(Numeric(14, 2), nullable=False)
    gst_rate = Column(Numeric(5, 2), default=0, nullable=False)
    gst_amount = Column(Numeric(14, 2), default=0, nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=False)
    paid_amount = Column(Numeric(14, 2), default=0, nullable=False)
    status = Column(Enum(DocumentPaymentStatus), default=DocumentPaymentStatus.UNPAID, nullable=False)
    notes = Column(Text, nullable=True)

    # Relationships
    income_account = relationship("ChartOfAccounts")
    devotee = relationship("Devotee")
    payments = relationship("InvoicePayment", back_populates="invoice", cascade="all, delete-orphan")


class InvoicePayment(Base, AuditMixin):
    __tablename__ = "invoice_payments"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False)
    payment_date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    payment_mode = Column(String, nullable=False)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    reference_number = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    # Relationships
    invoice = relationship("Invoice", back_populates="payments")
    bank_account = relationship("BankAccount")
