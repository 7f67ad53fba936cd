import logging
from typing import Optional
from datetime import date

from sqlalchemy.orm import Session

from models.expenses import Expense, ExpenseStatus
from models.audit_mixin import now_ist
from schemas.expenses import ExpenseCreate, ExpenseUpdate, ExpenseMarkPaid
from schemas.general_ledger import LedgerLine
from crud import general_ledger as crud_ledger
from crud import bank_accounts as crud_bank
from crud import vendors as crud_vendors
from crud.bills import resolve_account
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
from utils.formatting import to_money
from utils.document_numbers import generate_document_number, EXPENSE_PREFIX

logger = logging.getLogger(__name__)

EXPENSE_REFERENCE = "Expense"

def get_expense(db: Session, expense_id: int, tenant_id: str) -> Optional[Expense]:
    return db.query(Expense).filter(Expense.id == expense_id, Expense.tenant_id == tenant_id).first()

def get_expenses(db: Session, tenant_id: str, status: ExpenseStatus = None, expense_account_id: int = None,
                 start_date: date = None, end_date: date = None, skip: int = 0, limit: int = 100):
    query = db.query(Expense).filter(Expense.tenant_id == tenant_id)
    if status:
        query = query.filter(Expense.status == status)
    if expense_account_id:
        query = query.filter(Expense.expense_account_id == expense_account_id)
    if start_date:
        query = query.filter(Expense.expense_date >= start_date)
    if end_date:
        query = query.filter(Expense.expense_date <= end_date)
    return query.order_by(Expense.expense_date.desc(), Expense.id.desc()).offset(skip).limit(limit).all()

def _post_expense(db: Session, db_expense: Expense, tenant_id: str, user_id: str):
    paid_from = crud_bank.settlement_account_id(db, tenant_id, db_expense.bank_account_id)
    description = f"Expense {db_expense.expense_number}" + (f" - {db_expense.description}" if db_expense.description else "")
    amount = to_money(db_expense.amount)
    lines = [
        LedgerLine(account_id=db_expense.expense_account_id, debit_amount=amount, description=description),
        LedgerLine(account_id=paid_from, credit_amount=amount, description=description),
    ]
    crud_ledger.post_transaction(db, tenant_id, db_expense.paid_date, lines, EXPENSE_REFERENCE, db_expense.id, description, user_id)

def create_expense(db: Session, expense: ExpenseCreate, tenant_id: str, user_id: str = None) -> Expense:
    """Record an expense. A Paid expense is posted straight away: Dr expense, Cr bank or cash."""
    if expense.vendor_id is not None and not crud_vendors.get_vendor(db, expense.vendor_id, tenant_id):
        raise ValueError(f"Vendor {expense.vendor_id} not found")
    expense_account = resolve_account(db, tenant_id, expense.expense_account_id, "Expense", 'default_general_expense_account_id')
    is_paid = expense.status == ExpenseStatus.PAID
    if is_paid:
        # resolves (and seeds) the settlement account before anything is flushed
        crud_bank.settlement_account_id(db, tenant_id, expense.bank_account_id)

    db_expense = Expense(
        **expense.model_dump(exclude={'expense_account_id', 'amount', 'paid_date'}),
        expense_number=generate_document_number(db, Expense.expense_number, tenant_id, EXPENSE_PREFIX, expense.expense_date),
        expense_account_id=expense_account.id,
        amount=to_money(expense.amount),
        paid_date=(expense.paid_date or expense.expense_date) if is_paid else None,
        tenant_id=tenant_id,
        created_by=user_id,
    )
    db.add(db_expense)
    db.flush()

    if is_paid:
        try:
            _post_expense(db, db_expense, tenant_id, user_id)
        except ValueError:
            db.rollback()
            raise

    db.commit()
    db.refresh(db_expense)
    logger.info(f"Expense {db_expense.expense_number} ({db_expense.status.value}) recorded by {user_id} for tenant {tenant_id}")
    return db_expense

def mark_expense_paid(db: Session, expense_id: int, payment: ExpenseMarkPaid, tenant_id: str, user_id: str):
    db_expense = get_expense(db, expense_id, tenant_id)
    if not db_expense:
        return None
    if db_expense.status == ExpenseStatus.PAID:
        raise ValueError(f"Expense {db_expense.expense_number} is already paid")
    crud_bank.settlement_account_id(db, tenant_id, payment.bank_account_id)

    old_values = sqlalchemy_to_dict(db_expense)
    db_expense.status = ExpenseStatus.PAID
    db_expense.paid_date = payment.paid_date or date.today()
    db_expense.payment_mode = payment.payment_mode
    db_expense.bank_account_id = payment.bank_account_id
    if payment.reference_number:
        db_expense.reference_number = payment.reference_number
    db_expense.updated_by = user_id

    try:
        _post_expense(db, db_expense, tenant_id, user_id)
    except ValueError:
        db.rollback()
        raise
    log_change(db, tenant_id, 'expenses', db_expense, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_expense)
    logger.info(f"Expense {db_expense.expense_number} marked paid by {user_id}")
    return db_expense

def update_expense(db: Session, expense_id: int, expense_update: ExpenseUpdate, tenant_id: str, user_id: str):
    db_expense = get_expense(db, expense_id, tenant_id)
    if not db_expense:
        return None
    update_data = expense_update.model_dump(exclude_unset=True)
    if update_data.get('vendor_id') is not None and not crud_vendors.get_vendor(db, update_data['vendor_id'], tenant_id):
        raise ValueError(f"Vendor {update_data['vendor_id']} not found")
    old_values = sqlalchemy_to_dict(db_expense)
    for key, value in update_data.items():
        setattr(db_expense, key, value)
    db_expense.updated_by = user_id
    log_change(db, tenant_id, 'expenses', db_expense, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_expense)
    return db_expense

def delete_expense(db: Session, expense_id: int, tenant_id: str, user_id: str) -> bool:
    db_expense = get_expense(db, expense_id, tenant_id)
    if not db_expense:
        return False
    if db_expense.status == ExpenseStatus.PAID:
        raise ValueError("Paid expenses are posted to the ledger and cannot be deleted.")
    old_values = sqlalchemy_to_dict(db_expense)
    db_expense.deleted_at = now_ist()
    db_expense.deleted_by = user_id
    log_change(db, tenant_id, 'expenses', db_expense, user_id, 'DELETE', old_values)
    db.commit()
    return True
