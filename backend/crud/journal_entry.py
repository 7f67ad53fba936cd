import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from models.journal_entry import JournalEntry
from models.journal_item import JournalEntryLine
from schemas.journal_entry import JournalEntryCreate
from schemas.general_ledger import LedgerLine
from crud import general_ledger as crud_ledger
from utils.document_numbers import generate_document_number, JOURNAL_PREFIX
from models.audit_mixin import now_ist

logger = logging.getLogger(__name__)

REFERENCE_TYPE = "Journal Entry"
POSTED = "Posted"
REVERSED = "Reversed"

def _post_entry(db: Session, db_entry: JournalEntry, tenant_id: str, user_id: str):
    lines = [
        LedgerLine(
            account_id=line.account_id,
            debit_amount=line.debit_amount,
            credit_amount=line.credit_amount,
            description=line.description or db_entry.description,
        )
        for line in db_entry.lines
    ]
    crud_ledger.post_transaction(
        db, tenant_id, db_entry.entry_date, lines, REFERENCE_TYPE, db_entry.id,
        description=db_entry.description or db_entry.entry_number, user_id=user_id
    )
    db_entry.status = POSTED
    db_entry.posted_at = now_ist()
    db_entry.posted_by = user_id

def create_journal_entry(db: Session, entry: JournalEntryCreate, tenant_id: str, user_id: str = None):
    """
    Creates a journal entry with numbered lines and posts it to the general ledger.
    Nothing is saved if posting fails.
    """
    db_entry = JournalEntry(
        entry_number=generate_document_number(db, JournalEntry.entry_number, tenant_id, JOURNAL_PREFIX, entry.entry_date),
        entry_date=entry.entry_date,
        description=entry.description,
        reference_document=entry.reference_document,
        tenant_id=tenant_id,
        created_by=user_id,
    )
    db.add(db_entry)

    for line_number, line_data in enumerate(entry.lines, start=1):
        db_entry.lines.append(JournalEntryLine(
            **line_data.model_dump(),
            line_number=line_number,
            tenant_id=tenant_id,
            created_by=user_id,
        ))
    db.flush()  # ids are needed as the ledger reference

    try:
        _post_entry(db, db_entry, tenant_id, user_id)
    except ValueError:
        db.rollback()
        raise

    db.commit()
    db.refresh(db_entry)
    logger.info(f"Journal entry {db_entry.entry_number} posted by {user_id} for tenant {tenant_id}")
    return db_entry

def reverse_journal_entry(db: Session, entry_id: int, tenant_id: str, user_id: str,
                          reversal_date: Optional[date] = None, reason: Optional[str] = None):
    """
    Posts a new entry with every line mirrored and marks the original Reversed.
    Returns the reversing entry, or None when the original does not exist.
    """
    original = get_journal_entry(db, entry_id, tenant_id)
    if not original:
        return None
    if original.status != POSTED:
        raise ValueError(f"Only posted journal entries can be reversed (status is {original.status})")

    reversal_date = reversal_date or date.today()
    reversal = JournalEntry(
        entry_number=generate_document_number(db, JournalEntry.entry_number, tenant_id, JOURNAL_PREFIX, reversal_date),
        entry_date=reversal_date,
        description=reason or f"Reversal of {original.entry_number}",
        reference_document=original.entry_number,
        reversal_of_id=original.id,
        tenant_id=tenant_id,
        created_by=user_id,
    )
    db.add(reversal)
    for line in original.lines:
        reversal.lines.append(JournalEntryLine(
            line_number=line.line_number,
            account_id=line.account_id,
            description=line.description,
            debit_amount=line.credit_amount,
            credit_amount=line.debit_amount,
            tenant_id=tenant_id,
            created_by=user_id,
        ))
    db.flush()

    try:
        _post_entry(db, reversal, tenant_id, user_id)
    except ValueError:
        db.rollback()
        raise

    original.status = REVERSED
    original.updated_by = user_id
    db.commit()
    db.refresh(reversal)
    logger.info(f"Journal entry {original.entry_number} reversed by {reversal.entry_number} ({user_id})")
    return reversal

def get_journal_entry(db: Session, entry_id: int, tenant_id: str):
    return db.query(JournalEntry).options(selectinload(JournalEntry.lines)).filter(
        JournalEntry.id == entry_id,
        JournalEntry.tenant_id == tenant_id
    ).first()

def get_journal_entries(
    db: Session,
    tenant_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100
):
    """
    Retrieves a list of journal entries with optional date filtering.
    """
    query = db.query(JournalEntry).options(selectinload(JournalEntry.lines)).filter(
        JournalEntry.tenant_id == tenant_id
    )

    if start_date:
        query = query.filter(JournalEntry.entry_date >= start_date)
    if end_date:
        query = query.filter(JournalEntry.entry_date <= end_date)

    return query.order_by(JournalEntry.entry_date.desc(), JournalEntry.id.desc()).offset(skip).limit(limit).all()
