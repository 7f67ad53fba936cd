import re
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

# Prefixes for tenant-scoped, year-scoped document numbers, e.g. DON-2024-0042
DEVOTEE_PREFIX = "DEV"
DONATION_PREFIX = "DON"
BILL_PREFIX = "BILL"
INVOICE_PREFIX = "INV"
EXPENSE_PREFIX = "EXP"
JOURNAL_PREFIX = "JRNL"
ORDER_PREFIX = "ORD"

_TRAILING_NUMBER = re.compile(r"-(\d+)$")


def generate_document_number(db: Session, column, tenant_id: str, prefix: str, on_date: Optional[date] = None) -> str:
    """
    Next number in the PREFIX-YYYY-NNNN sequence for a tenant.

    `column` is the model attribute holding the number (e.g. Donation.receipt_number).
    The sequence restarts at 0001 every calendar year. Soft-deleted rows still
    count so a number is never handed out twice.
    """
    year = (on_date or date.today()).year
    year_prefix = f"{prefix}-{year}-"
    model = column.class_

    existing = db.query(column).filter(
        model.tenant_id == tenant_id,
        column.like(f"{year_prefix}%")
    ).execution_options(include_deleted=True).all()

    next_number = 1
    for (code,) in existing:
        match = _TRAILING_NUMBER.search(code or "")
        if match:
            next_number = max(next_number, int(match.group(1)) + 1)

    return f"{year_prefix}{next_number:04d}"


def generate_slug(name: str) -> str:
    """URL slug for an event name: lowercase, hyphen separated, [a-z0-9-] only."""
    slug = (name or "").lower().strip()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")
