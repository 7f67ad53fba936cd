"""
Bank accounts, statement lines and reconciliation.

A bank account's `current_balance` tracks the bank statement: it moves with
every imported statement line. The books side is the linked ledger account.
Reconciliation ticks statement lines off, optionally pairing each one with the
ledger row it corresponds to, in a single commit per request.
"""
import io
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from models.bank_accounts import BankAccount, BankTransaction
from models.general_ledger import GeneralLedger
from models.audit_mixin import now_ist
from schemas.bank_accounts import BankAccountCreate, BankAccountUpdate, BankTransactionCreate, ReconciliationSummary
from crud import chart_of_accounts as crud_accounts
from crud import financial_settings as crud_settings
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
from utils.formatting import to_money

logger = logging.getLogger(__name__)

CREDIT = "Credit"
DEBIT = "Debit"
ZERO = Decimal("0.00")


def get_bank_account(db: Session, bank_account_id: int, tenant_id: str) -> Optional[BankAccount]:
    return db.query(BankAccount).filter(
        BankAccount.id == bank_account_id,
        BankAccount.tenant_id == tenant_id
    ).first()


def get_bank_accounts(db: Session, tenant_id: str, include_inactive: bool = False):
    query = db.query(BankAccount).filter(BankAccount.tenant_id == tenant_id)
    if not include_inactive:
        query = query.filter(BankAccount.is_active == True)
    return query.order_by(BankAccount.bank_name, BankAccount.account_name).all()


def _validate_ledger_account(db: Session, ledger_account_id: Optional[int], tenant_id: str):
    if ledger_account_id is None:
        return
    account = crud_accounts.get_account(db, ledger_account_id, tenant_id)
    if not account or not account.is_active:
        raise ValueError(f"Ledger account {ledger_account_id} not found")
    if account.account_type != "Asset":
        raise ValueError("A bank account can only be linked to an Asset ledger account")


def create_bank_account(db: Session, bank_account: BankAccountCreate, tenant_id: str, user_id: str = None) -> BankAccount:
    _validate_ledger_account(db, bank_account.ledger_account_id, tenant_id)
    db_account = BankAccount(
        **bank_account.model_dump(),
        current_balance=bank_account.opening_balance,
        tenant_id=tenant_id,
        created_by=user_id,
    )
    db.add(db_account)
    db.commit()
    db.refresh(db_account)
    logger.info(f"Bank account {db_account.bank_name} / {db_account.account_number} created for tenant {tenant_id}")
    return db_account


def update_bank_account(db: Session, bank_account_id: int, update: BankAccountUpdate, tenant_id: str, user_id: str):
    db_account = get_bank_account(db, bank_account_id, tenant_id)
    if not db_account:
        return None
    update_data = update.model_dump(exclude_unset=True)
    if 'ledger_account_id' in update_data:
        _validate_ledger_account(db, update_data['ledger_account_id'], tenant_id)

    old_values = sqlalchemy_to_dict(db_account)
    for key, value in update_data.items():
        setattr(db_account, key, value)
    db_account.updated_by = user_id
    log_change(db, tenant_id, 'bank_accounts', db_account, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_account)
    return db_account


def settlement_account_id(db: Session, tenant_id: str, bank_account_id: Optional[int]) -> int:
    """
    Ledger account that money moves through for a payment: the bank account's
    linked ledger account (or the default bank account when it is not linked),
    or the default cash account when no bank account is given.
    """
    if bank_account_id is None:
        return crud_settings.get_default_account(db, tenant_id, 'default_cash_account_id').id
    bank_account = get_bank_account(db, bank_account_id, tenant_id)
    if not bank_account or not bank_account.is_active:
        raise ValueError(f"Bank account {bank_account_id} not found")
    if bank_account.ledger_account_id:
        return bank_account.ledger_account_id
    return crud_settings.get_default_account(db, tenant_id, 'default_bank_account_id').id


def _apply_statement_line(db_account: BankAccount, line: BankTransactionCreate, tenant_id: str, user_id: str) -> BankTransaction:
    amount = to_money(line.amount)
    movement = amount if line.transaction_type == CREDIT else -amount
    db_account.current_balance = to_money(db_account.current_balance) + movement
    return BankTransaction(
        **line.model_dump(exclude={'amount'}),
        amount=amount,
        bank_account_id=db_account.id,
        tenant_id=tenant_id,
        created_by=user_id,
    )


def import_transactions(db: Session, bank_account_id: int, lines: List[BankTransactionCreate], tenant_id: str, user_id: str):
    db_account = get_bank_account(db, bank_account_id, tenant_id)
    if not db_account:
        return None
    created = []
    for line in lines:
        txn = _apply_statement_line(db_account, line, tenant_id, user_id)
        db.add(txn)
        created.append(txn)
    db.commit()
    for txn in created:
        db.refresh(txn)
    logger.info(f"Imported {len(created)} statement lines into bank account {bank_account_id} for tenant {tenant_id}")
    return created


def _cell_amount(value) -> Decimal:
    if value is None or pd.isna(value) or str(value).strip() == "":
        return ZERO
    return to_money(str(value).replace(",", "").strip())


def import_statement_excel(db: Session, bank_account_id: int, contents: bytes, tenant_id: str, user_id: str):
    """
    Import a statement workbook with a header row. Recognised columns
    (case-insensitive): Date, Description/Narration, Reference/Ref No,
    Debit/Withdrawal, Credit/Deposit, Balance. Rows that cannot be parsed are
    skipped and reported.
    """
    db_account = get_bank_account(db, bank_account_id, tenant_id)
    if not db_account:
        return None

    df = pd.read_excel(io.BytesIO(contents))
    df.columns = [str(c).strip().lower() for c in df.columns]

    def pick(*names):
        return next((n for n in names if n in df.columns), None)

    date_col = pick("date", "transaction date", "txn date", "value date")
    desc_col = pick("description", "narration", "particulars")
    ref_col = pick("reference", "ref no", "reference number", "cheque no")
    debit_col = pick("debit", "withdrawal", "withdrawals")
    credit_col = pick("credit", "deposit", "deposits")
    balance_col = pick("balance", "closing balance")
    if not date_col or not (debit_col or credit_col):
        raise ValueError("Statement must have a Date column and Debit and/or Credit columns")

    imported, errors = 0, []
    for row_idx, row in df.iterrows():
        excel_row = row_idx + 2
        try:
            if pd.isna(row[date_col]):
                raise ValueError("missing date")
            txn_date = pd.to_datetime(row[date_col], dayfirst=True).date()
            debit = _cell_amount(row[debit_col]) if debit_col else ZERO
            credit = _cell_amount(row[credit_col]) if credit_col else ZERO
            if (debit > 0) == (credit > 0):
                raise ValueError("exactly one of debit or credit must be set")
            line = BankTransactionCreate(
                transaction_date=txn_date,
                description=str(row[desc_col]).strip() if desc_col and pd.notna(row[desc_col]) else None,
                reference_number=str(row[ref_col]).strip() if ref_col and pd.notna(row[ref_col]) else None,
                transaction_type=CREDIT if credit > 0 else DEBIT,
                amount=credit if credit > 0 else debit,
                balance=_cell_amount(row[balance_col]) if balance_col and pd.notna(row[balance_col]) else None,
            )
        except (ValueError, TypeError, InvalidOperation) as e:
            logger.warning(f"Skipping statement row {excel_row} for bank account {bank_account_id}: {e}")
            errors.append(f"Row {excel_row}: {e}")
            continue
        db.add(_apply_statement_line(db_account, line, tenant_id, user_id))
        imported += 1

    db.commit()
    db.refresh(db_account)
    logger.info(f"Statement upload for bank account {bank_account_id}: {imported} imported, {len(errors)} skipped")
    return {"imported": imported, "skipped": len(errors), "errors": errors, "current_balance": db_account.current_balance}


def get_transactions(db: Session, bank_account_id: int, tenant_id: str, is_reconciled: Optional[bool] = None,
                     start_date: Optional[date] = None, end_date: Optional[date] = None):
    query = db.query(BankTransaction).filter(
        BankTransaction.bank_account_id == bank_account_id,
        BankTransaction.tenant_id == tenant_id
    )
    if is_reconciled is not None:
        query = query.filter(BankTransaction.is_reconciled == is_reconciled)
    if start_date:
        query = query.filter(BankTransaction.transaction_date >= start_date)
    if end_date:
        query = query.filter(BankTransaction.transaction_date <= end_date)
    return query.order_by(BankTransaction.transaction_date, BankTransaction.id).all()


def _ledger_side_matches(txn: BankTransaction, entry: GeneralLedger) -> bool:
    # Money into the bank is a debit on the bank's ledger account
    if txn.transaction_type == CREDIT:
        return to_money(entry.debit_amount) == to_money(txn.amount)
    return to_money(entry.credit_amount) == to_money(txn.amount)


def _matched_ledger_ids(db: Session, tenant_id: str) -> set:
    rows = db.query(BankTransaction.ledger_entry_id).filter(
        BankTransaction.tenant_id == tenant_id,
        BankTransaction.ledger_entry_id.isnot(None)
    ).all()
    return {row[0] for row in rows}


def _find_ledger_match(db: Session, txn: BankTransaction, ledger_account_id: int, taken: set) -> Optional[GeneralLedger]:
    amount_column = GeneralLedger.debit_amount if txn.transaction_type == CREDIT else GeneralLedger.credit_amount
    candidates = db.query(GeneralLedger).filter(
        GeneralLedger.tenant_id == txn.tenant_id,
        GeneralLedger.account_id == ledger_account_id,
        amount_column == to_money(txn.amount)
    ).all()
    candidates = [c for c in candidates if c.id not in taken]
    if not candidates:
        return None
    return min(candidates, key=lambda c: (abs((c.transaction_date - txn.transaction_date).days), c.id))


def reconcile(db: Session, bank_account_id: int, transaction_ids: List[int], tenant_id: str, user_id: str,
              ledger_matches: Optional[Dict[int, int]] = None, auto_match: bool = False):
    """
    Mark statement lines reconciled in one transaction.

    Ids that are already reconciled are skipped and reported, never re-stamped.
    Unknown ids or invalid ledger matches fail the whole request.
    """
    db_account = get_bank_account(db, bank_account_id, tenant_id)
    if not db_account:
        return None
    ledger_matches = ledger_matches or {}

    requested = list(dict.fromkeys(transaction_ids))
    txns = {
        t.id: t for t in db.query(BankTransaction).filter(
            BankTransaction.id.in_(requested),
            BankTransaction.bank_account_id == bank_account_id,
            BankTransaction.tenant_id == tenant_id
        ).with_for_update().all()
    }
    missing = [tid for tid in requested if tid not in txns]
    if missing:
        raise ValueError(f"Bank transactions not found for this account: {missing}")
    if (ledger_matches or auto_match) and not db_account.ledger_account_id:
        raise ValueError("Bank account is not linked to a ledger account, so transactions cannot be matched")

    taken = _matched_ledger_ids(db, tenant_id)
    reconciled, already, matched = [], [], {}
    stamp = now_ist()

    # Validate explicit matches before touching any row
    explicit = {}
    for tid, entry_id in ledger_matches.items():
        if tid not in txns or txns[tid].is_reconciled:
            continue
        entry = db.query(GeneralLedger).filter(
            GeneralLedger.id == entry_id,
            GeneralLedger.tenant_id == tenant_id
        ).first()
        if not entry or entry.account_id != db_account.ledger_account_id:
            raise ValueError(f"Ledger entry {entry_id} is not on this bank's ledger account")
        if entry.id in taken or entry.id in {e.id for e in explicit.values()}:
            raise ValueError(f"Ledger entry {entry.id} is already matched to another bank transaction")
        if not _ledger_side_matches(txns[tid], entry):
            raise ValueError(f"Ledger entry {entry.id} does not match the amount and direction of transaction {tid}")
        explicit[tid] = entry

    # Explicit pairs are reserved up front so auto-matching cannot claim them
    taken.update(e.id for e in explicit.values())

    for tid in requested:
        txn = txns[tid]
        if txn.is_reconciled:
            already.append(tid)
            continue

        entry = None
        if tid in explicit:
            entry = explicit[tid]
        elif auto_match:
            entry = _find_ledger_match(db, txn, db_account.ledger_account_id, taken)

        if entry:
            txn.ledger_entry_id = entry.id
            taken.add(entry.id)
            matched[tid] = entry.id

        txn.is_reconciled = True
        txn.reconciled_at = stamp
        txn.reconciled_by = user_id
        txn.updated_by = user_id
        reconciled.append(tid)

    db.commit()
    logger.info(f"Reconciled {len(reconciled)} transactions on bank account {bank_account_id} by {user_id} "
                f"({len(already)} already reconciled, {len(matched)} matched)")
    return {"reconciled": reconciled, "already_reconciled": already, "matched": matched}


def unreconcile(db: Session, bank_account_id: int, transaction_ids: List[int], tenant_id: str, user_id: str):
    db_account = get_bank_account(db, bank_account_id, tenant_id)
    if not db_account:
        return None
    txns = db.query(BankTransaction).filter(
        BankTransaction.id.in_(transaction_ids),
        BankTransaction.bank_account_id == bank_account_id,
        BankTransaction.tenant_id == tenant_id,
        BankTransaction.is_reconciled == True
    ).all()
    for txn in txns:
        txn.is_reconciled = False
        txn.reconciled_at = None
        txn.reconciled_by = None
        txn.ledger_entry_id = None
        txn.updated_by = user_id
    db.commit()
    logger.info(f"Unreconciled {len(txns)} transactions on bank account {bank_account_id} by {user_id}")
    return [t.id for t in txns]


def get_reconciliation_summary(db: Session, bank_account_id: int, tenant_id: str) -> Optional[ReconciliationSummary]:
    db_account = get_bank_account(db, bank_account_id, tenant_id)
    if not db_account:
        return None

    totals = {
        (True, CREDIT): ZERO, (True, DEBIT): ZERO,
        (False, CREDIT): ZERO, (False, DEBIT): ZERO,
    }
    counts = {True: 0, False: 0}
    for txn in get_transactions(db, bank_account_id, tenant_id):
        totals[(txn.is_reconciled, txn.transaction_type)] += to_money(txn.amount)
        counts[txn.is_reconciled] += 1

    statement_balance = to_money(db_account.current_balance)
    book_balance = None
    if db_account.ledger_account:
        book_balance = to_money(db_account.ledger_account.current_balance)

    return ReconciliationSummary(
        bank_account_id=bank_account_id,
        statement_balance=statement_balance,
        book_balance=book_balance,
        difference=statement_balance - book_balance if book_balance is not None else None,
        reconciled_count=counts[True],
        reconciled_credits=totals[(True, CREDIT)],
        reconciled_debits=totals[(True, DEBIT)],
        unreconciled_count=counts[False],
        unreconciled_credits=totals[(False, CREDIT)],
        unreconciled_debits=totals[(False, DEBIT)],
    )
