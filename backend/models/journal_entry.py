from sqlalchemy import Column, Integer, String, Date, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin

class JournalEntry(Base, AuditMixin):
    __tablename__ = "journal_entries"
    __table_args__ = (UniqueConstraint('tenant_id', 'entry_number', name='_tenant_entry_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    entry_number = Column(String(30), nullable=False, index=True)
    entry_date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    reference_document = Column(String, nullable=True)
    status = Column(String(20), nullable=False, default="Draft")  # Draft, Posted, Reversed
    posted_at = Column(DateTime(timezone=True), nullable=True)
    posted_by = Column(String, nullable=True)
    reversal_of_id = Column(Integer, nullable=True)

    # Relationships
    lines = relationship(
        "JournalEntryLine",
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="JournalEntryLine.line_number",
    )
