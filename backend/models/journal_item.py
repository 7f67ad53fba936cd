from sqlalchemy import Column, Integer, Numeric, ForeignKey, CheckConstraint, String
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class JournalEntryLine(Base, TimestampMixin):
    __tablename__ = "journal_entry_lines"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    line_number = Column(Integer, nullable=False)
    account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=False)
    description = Column(String, nullable=True)
    debit_amount = Column(Numeric(14, 2), CheckConstraint('debit_amount >= 0'), nullable=False, default=0)
    credit_amount = Column(Numeric(14, 2), CheckConstraint('credit_amount >= 0'), nullable=False, default=0)

    # Relationships
    journal_entry = relationship("JournalEntry", back_populates="lines")
    account = relationship("ChartOfAccounts")

    __table_args__ = (
        CheckConstraint(
            '(debit_amount > 0 AND credit_amount = 0) OR (debit_amount = 0 AND credit_amount > 0)',
            name='check_line_debit_or_credit_exclusive'
        ),
    )
