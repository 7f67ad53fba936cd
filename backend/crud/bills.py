import logging
from typing import Optional
from datetime import date

from sqlalchemy.orm import Session, selectinload

from models.bills import Bill, BillPayment, DocumentPaymentStatus
from models.audit_mixin import now_ist
from schemas.bills import BillCreate, BillUpdate, BillPaymentCreate
from schemas.general_ledger import LedgerLine
from crud import general_ledger as crud_ledger
from crud import financial_settings as crud_settings
from crud import chart_of_accounts as crud_accounts
from crud import bank_accounts as crud_bank
from crud import vendors as crud_vendors
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
from utils.formatting import to_money, gst_amounts
from utils.document_numbers import generate_document_number, BILL_PREFIX

logger = logging.getLogger(__name__)

BILL_REFERENCE = "Bill"
BILL_PAYMENT_REFERENCE = "Bill Payment"


def payment_status_for(paid_amount, total_amount) -> DocumentPaymentStatus:
    paid_amount = to_money(paid_amount)
    if paid_amount <= 0:
        return DocumentPaymentStatus.UNPAID
    if paid_amount >= to_money(total_amount):
        return DocumentPaymentStatus.PAID
    return DocumentPaymentStatus.PARTIAL


def resolve_account(db: Session, tenant_id: str, account_id: Optional[int], expected_type: str, default_field: str):
    """The given account (checked for type), or the tenant's default for that purpose."""
    if account_id is None:
        return crud_settings.get_default_account(db, tenant_id, default_field)
    account = crud_accounts.get_account(db, account_id, tenant_id)
    if not account or not account.is_active:
        raise ValueError(f"Account {account_id} not found")
    if account.account_type != expected_type:
        raise ValueError(f"Account {account.account_code} must be an {expected_type} account")
    return account


def get_bill(db: Session, bill_id: int, tenant_id: str) -> Optional[Bill]:
    return db.query(Bill).options(selectinload(Bill.payments), selectinload(Bill.vendor)).filter(
        Bill.id == bill_id,
        Bill.tenant_id == tenant_id
    ).first()


def get_bills(db: Session, tenant_id: str, vendor_id: int = None, status: DocumentPaymentStatus = None,
              start_date: date = None, end_date: date = None, skip: int = 0, limit: int = 100):
    query = db.query(Bill).options(selectinload(Bill.payments), selectinload(Bill.vendor)).filter(Bill.tenant_id == tenant_id)
    if vendor_id:
        query = query.filter(Bill.vendor_id == vendor_id)
    if status:
        query = query.filter(Bill.status == status)
    if start_date:
        query = query.filter(Bill.bill_date >= start_date)
    if end_date:
        query = query.filter(Bill.bill_date <= end_date)
    return query.order_by(Bill.bill_date.desc(), Bill.id.desc()).offset(skip).limit(limit).all()


def create_bill(db: Session, bill: BillCreate, tenant_id: str, user_id: str = None) -> Bill:
    """
    Record a vendor bill and post it:
    Dr expense (subtotal), Dr GST input (gst), Cr Accounts Payable (total).
    """
    vendor = crud_vendors.get_vendor(db, bill.vendor_id, tenant_id)
    if not vendor:
        raise ValueError(f"Vendor {bill.vendor_id} not found")
    expense_account = resolve_account(db, tenant_id, bill.expense_account_id, "Expense", 'default_general_expense_account_id')
    payable_account = crud_settings.get_default_account(db, tenant_id, 'default_accounts_payable_account_id')
    gst_input = crud_settings.get_default_account(db, tenant_id, 'default_gst_input_account_id')

    subtotal = to_money(bill.subtotal)
    gst_amount, total = gst_amounts(subtotal, bill.gst_rate)

    db_bill = Bill(
        **bill.model_dump(exclude={'expense_account_id', 'subtotal'}),
        bill_number=generate_document_number(db, Bill.bill_number, tenant_id, BILL_PREFIX, bill.bill_date),
        expense_account_id=expense_account.id,
        subtotal=subtotal,
        gst_amount=gst_amount,
        total_amount=total,
        paid_amount=0,
        status=DocumentPaymentStatus.UNPAID,
        tenant_id=tenant_id,
        created_by=user_id,
    )
    db.add(db_bill)
    db.flush()

    description = f"Bill {db_bill.bill_number} - {vendor.vendor_name}"
    lines = [LedgerLine(account_id=expense_account.id, debit_amount=subtotal, description=description)]
    if gst_amount > 0:
        lines.append(LedgerLine(account_id=gst_input.id, debit_amount=gst_amount, description=f"GST input on {db_bill.bill_number}"))
    lines.append(LedgerLine(
        account_id=payable_account.id,
        credit_amount=total,
        description=description,
        is_gst_applicable=gst_amount > 0,
        gst_rate=bill.gst_rate if gst_amount > 0 else None,
        gst_amount=gst_amount if gst_amount > 0 else None,
    ))

    try:
        crud_ledger.post_transaction(db, tenant_id, bill.bill_date, lines, BILL_REFERENCE, db_bill.id, description, user_id)
    except ValueError:
        db.rollback()
        raise

    db.commit()
    db.refresh(db_bill)
    logger.info(f"Bill {db_bill.bill_number} for {total} recorded by {user_id} for tenant {tenant_id}")
    return db_bill


def update_bill(db: Session, bill_id: int, bill_update: BillUpdate, tenant_id: str, user_id: str):
    """Only descriptive fields can change once a bill is posted."""
    db_bill = get_bill(db, bill_id, tenant_id)
    if not db_bill:
        return None
    old_values = sqlalchemy_to_dict(db_bill)
    for key, value in bill_update.model_dump(exclude_unset=True).items():
        setattr(db_bill, key, value)
    db_bill.updated_by = user_id
    log_change(db, tenant_id, 'bills', db_bill, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_bill)
    return db_bill


def record_bill_payment(db: Session, bill_id: int, payment: BillPaymentCreate, tenant_id: str, user_id: str = None):
    """Pay (part of) a bill: Dr Accounts Payable, Cr bank or cash."""
    db_bill = get_bill(db, bill_id, tenant_id)
    if not db_bill:
        return None

    amount = to_money(payment.amount)
    outstanding = to_money(db_bill.total_amount) - to_money(db_bill.paid_amount)
    if outstanding <= 0:
        raise ValueError(f"Bill {db_bill.bill_number} is already fully paid")
    if amount > outstanding:
        raise ValueError(f"Payment amount ({amount}) exceeds the outstanding balance ({outstanding})")

    payable_account = crud_settings.get_default_account(db, tenant_id, 'default_accounts_payable_account_id')
    paid_from = crud_bank.settlement_account_id(db, tenant_id, payment.bank_account_id)

    db_payment = BillPayment(
        **payment.model_dump(exclude={'amount'}),
        amount=amount,
        bill_id=db_bill.id,
        tenant_id=tenant_id,
        created_by=user_id,
    )
    db.add(db_payment)
    db.flush()

    description = f"Payment for bill {db_bill.bill_number} ({payment.payment_mode})"
    lines = [
        LedgerLine(account_id=payable_account.id, debit_amount=amount, description=description),
        LedgerLine(account_id=paid_from, credit_amount=amount, description=description),
    ]
    try:
        crud_ledger.post_transaction(db, tenant_id, payment.payment_date, lines, BILL_PAYMENT_REFERENCE, db_payment.id, description, user_id)
    except ValueError:
        db.rollback()
        raise

    db_bill.paid_amount = to_money(db_bill.paid_amount) + amount
    db_bill.status = payment_status_for(db_bill.paid_amount, db_bill.total_amount)
    db_bill.updated_by = user_id
    db.commit()
    db.refresh(db_payment)
    logger.info(f"Payment of {amount} recorded against bill {db_bill.bill_number} by {user_id}; status {db_bill.status.value}")
    return db_payment


def delete_bill(db: Session, bill_id: int, tenant_id: str, user_id: str) -> bool:
    db_bill = get_bill(db, bill_id, tenant_id)
    if not db_bill:
        return False
    if crud_ledger.get_entries_for_reference(db, tenant_id, BILL_REFERENCE, db_bill.id):
        raise ValueError("Posted bills cannot be deleted. Post a reversing journal entry instead.")
    db_bill.deleted_at = now_ist()
    db_bill.deleted_by = user_id
    db.commit()
    return True
