import logging
from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from models.donations import Donation, DonationPaymentStatus
from models.audit_mixin import now_ist
from schemas.donations import DonationCreate, DonationUpdate, DonationStatusUpdate
from schemas.general_ledger import LedgerLine
from crud import general_ledger as crud_ledger
from crud import financial_settings as crud_settings
from crud import bank_accounts as crud_bank
from crud import devotees as crud_devotees
from crud import masters as crud_masters
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
from utils.formatting import to_money
from utils.document_numbers import generate_document_number, DONATION_PREFIX

logger = logging.getLogger(__name__)

DONATION_REFERENCE = "Donation"
DONATION_REFUND_REFERENCE = "Donation Refund"


def get_donation(db: Session, donation_id: int, tenant_id: str) -> Optional[Donation]:
    return db.query(Donation).options(joinedload(Donation.devotee), joinedload(Donation.category)).filter(
        Donation.id == donation_id,
        Donation.tenant_id == tenant_id
    ).first()


def get_donations(db: Session, tenant_id: str, devotee_id: int = None, category_id: int = None,
                  payment_status: DonationPaymentStatus = None, start_date: date = None, end_date: date = None,
                  skip: int = 0, limit: int = 100):
    query = db.query(Donation).filter(Donation.tenant_id == tenant_id)
    if devotee_id:
        query = query.filter(Donation.devotee_id == devotee_id)
    if category_id:
        query = query.filter(Donation.category_id == category_id)
    if payment_status:
        query = query.filter(Donation.payment_status == payment_status)
    if start_date:
        query = query.filter(Donation.donation_date >= start_date)
    if end_date:
        query = query.filter(Donation.donation_date <= end_date)
    return query.order_by(Donation.donation_date.desc(), Donation.id.desc()).offset(skip).limit(limit).all()


def get_donation_summary(db: Session, tenant_id: str, start_date: date = None, end_date: date = None) -> dict:
    """Totals over completed donations only."""
    query = db.query(
        func.coalesce(func.sum(Donation.amount), 0),
        func.count(Donation.id),
    ).filter(Donation.tenant_id == tenant_id, Donation.payment_status == DonationPaymentStatus.COMPLETED)
    if start_date:
        query = query.filter(Donation.donation_date >= start_date)
    if end_date:
        query = query.filter(Donation.donation_date <= end_date)
    total, count = query.one()
    eligible = query.filter(Donation.is_80g_eligible == True).with_entities(
        func.coalesce(func.sum(Donation.amount), 0)
    ).scalar()
    return {"total_amount": to_money(total), "donation_count": count, "eligible_80g_amount": to_money(eligible)}


def _post_donation(db: Session, db_donation: Donation, tenant_id: str, posting_date: date, user_id: str, income_account_id: int):
    """Dr cash/bank, Cr donation income. Caller commits."""
    received_in = crud_bank.settlement_account_id(db, tenant_id, db_donation.bank_account_id)
    donor = db_donation.devotee.full_name if db_donation.devotee else db_donation.donor_name
    description = f"Donation {db_donation.receipt_number} - {donor}"
    lines = [
        LedgerLine(account_id=received_in, debit_amount=db_donation.amount, description=description),
        LedgerLine(account_id=income_account_id, credit_amount=db_donation.amount, description=description),
    ]
    crud_ledger.post_transaction(db, tenant_id, posting_date, lines, DONATION_REFERENCE, db_donation.id, description, user_id)
    db_donation.is_posted = True


def create_donation(db: Session, donation: DonationCreate, tenant_id: str, user_id: str = None) -> Donation:
    """Record a donation; a Completed donation is posted to the ledger in the same transaction."""
    devotee = None
    if donation.devotee_id:
        devotee = crud_devotees.get_devotee(db, donation.devotee_id, tenant_id)
        if not devotee:
            raise ValueError(f"Devotee {donation.devotee_id} not found")
    category = None
    if donation.category_id:
        category = crud_masters.get_donation_category(db, donation.category_id, tenant_id)
        if not category:
            raise ValueError(f"Donation category {donation.category_id} not found")
    income_account = crud_settings.get_default_account(db, tenant_id, 'default_donation_income_account_id')

    db_donation = Donation(
        **donation.model_dump(exclude={'amount'}),
        amount=to_money(donation.amount),
        receipt_number=generate_document_number(db, Donation.receipt_number, tenant_id, DONATION_PREFIX, donation.donation_date),
        is_80g_eligible=bool(category and category.is_80g_eligible),
        is_posted=False,
        tenant_id=tenant_id,
        created_by=user_id,
    )
    db_donation.devotee = devotee
    db.add(db_donation)
    db.flush()

    if db_donation.payment_status == DonationPaymentStatus.COMPLETED:
        try:
            _post_donation(db, db_donation, tenant_id, db_donation.donation_date, user_id, income_account.id)
        except ValueError:
            db.rollback()
            raise

    db.commit()
    db.refresh(db_donation)
    logger.info(f"Donation {db_donation.receipt_number} of {db_donation.amount} ({db_donation.payment_status.value}) recorded by {user_id}")
    return db_donation


def update_donation(db: Session, donation_id: int, donation_update: DonationUpdate, tenant_id: str, user_id: str):
    db_donation = get_donation(db, donation_id, tenant_id)
    if not db_donation:
        return None
    update_data = donation_update.model_dump(exclude_unset=True)
    if 'donor_name' in update_data and not db_donation.devotee_id:
        if not (update_data['donor_name'] and update_data['donor_name'].strip()):
            raise ValueError("Donor name is required for a donation that is not linked to a devotee")
    if 'category_id' in update_data:
        category = None
        if update_data['category_id']:
            category = crud_masters.get_donation_category(db, update_data['category_id'], tenant_id)
            if not category:
                raise ValueError(f"Donation category {update_data['category_id']} not found")
        db_donation.is_80g_eligible = bool(category and category.is_80g_eligible)

    old_values = sqlalchemy_to_dict(db_donation)
    for key, value in update_data.items():
        setattr(db_donation, key, value)
    db_donation.updated_by = user_id
    log_change(db, tenant_id, 'donations', db_donation, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_donation)
    return db_donation


def update_donation_status(db: Session, donation_id: int, status_update: DonationStatusUpdate, tenant_id: str, user_id: str):
    """
    Allowed moves: Pending -> Completed (posts), Pending -> Failed,
    Completed -> Refunded (posts the reversal).
    """
    db_donation = get_donation(db, donation_id, tenant_id)
    if not db_donation:
        return None

    current = db_donation.payment_status
    target = status_update.payment_status
    posting_date = status_update.status_date or date.today()
    old_values = sqlalchemy_to_dict(db_donation)

    if current == DonationPaymentStatus.PENDING and target == DonationPaymentStatus.COMPLETED:
        income_account = crud_settings.get_default_account(db, tenant_id, 'default_donation_income_account_id')
        try:
            _post_donation(db, db_donation, tenant_id, posting_date, user_id, income_account.id)
        except ValueError:
            db.rollback()
            raise
    elif current == DonationPaymentStatus.PENDING and target == DonationPaymentStatus.FAILED:
        pass
    elif current == DonationPaymentStatus.COMPLETED and target == DonationPaymentStatus.REFUNDED:
        try:
            crud_ledger.reverse_transaction(
                db, tenant_id, DONATION_REFERENCE, db_donation.id, DONATION_REFUND_REFERENCE, db_donation.id,
                posting_date, f"Refund of donation {db_donation.receipt_number}", user_id
            )
        except ValueError:
            db.rollback()
            raise
    else:
        raise ValueError(f"Cannot change a {current.value} donation to {target.value}")

    db_donation.payment_status = target
    if status_update.transaction_reference:
        db_donation.transaction_reference = status_update.transaction_reference
    db_donation.updated_by = user_id
    log_change(db, tenant_id, 'donations', db_donation, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_donation)
    logger.info(f"Donation {db_donation.receipt_number} moved from {current.value} to {target.value} by {user_id}")
    return db_donation


def delete_donation(db: Session, donation_id: int, tenant_id: str, user_id: str) -> bool:
    db_donation = get_donation(db, donation_id, tenant_id)
    if not db_donation:
        return False
    if db_donation.is_posted:
        raise ValueError("Posted donations cannot be deleted. Refund the donation instead.")
    old_values = sqlalchemy_to_dict(db_donation)
    db_donation.deleted_at = now_ist()
    db_donation.deleted_by = user_id
    log_change(db, tenant_id, 'donations', db_donation, user_id, 'DELETE', old_values)
    db.commit()
    return True
