"""
General ledger posting and ledger views.

Every business event (donation, bill, bill payment, invoice, invoice payment,
expense, journal entry, Gurukul order) lands here as a set of balanced lines.
`post_transaction` validates the set, moves each account's running balance
using the account type's sign convention and appends immutable ledger rows.
It only flushes: the caller commits once so the document and its ledger rows
are saved together or not at all.
"""
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from models.chart_of_accounts import ChartOfAccounts
from models.general_ledger import GeneralLedger
from schemas.general_ledger import LedgerLine, LedgerView
from crud import financial_periods as crud_periods
from utils.formatting import to_money

logger = logging.getLogger(__name__)

DEBIT_NORMAL_TYPES = ("Asset", "Expense")
NO_OPEN_PERIOD_MESSAGE = "No open financial period found"
ZERO = Decimal("0.00")


def is_debit_normal(account_type: str) -> bool:
    return account_type in DEBIT_NORMAL_TYPES


def signed_movement(account_type: str, debit, credit) -> Decimal:
    """Effect of a debit/credit pair on an account's balance."""
    debit = to_money(debit)
    credit = to_money(credit)
    if is_debit_normal(account_type):
        return debit - credit
    return credit - debit


def validate_lines(lines: List[LedgerLine]):
    if len(lines) < 2:
        raise ValueError("A posting needs at least two lines")

    total_debit = ZERO
    total_credit = ZERO
    for index, line in enumerate(lines, start=1):
        debit = to_money(line.debit_amount)
        credit = to_money(line.credit_amount)
        if (debit > 0) == (credit > 0):
            raise ValueError(f"Line {index} must have either a debit or a credit amount, not both or neither")
        total_debit += debit
        total_credit += credit

    if total_debit != total_credit:
        raise ValueError(f"Debits ({total_debit}) must equal credits ({total_credit})")
    return total_debit


def post_transaction(
    db: Session,
    tenant_id: str,
    transaction_date: date,
    lines: List[LedgerLine],
    reference_type: str,
    reference_id: int,
    description: Optional[str] = None,
    user_id: Optional[str] = None,
) -> List[GeneralLedger]:
    """
    Write a balanced set of ledger rows for one business event.

    Raises:
        ValueError: unbalanced or malformed lines, unknown/inactive account,
            or no open financial period covering transaction_date.
    """
    total = validate_lines(lines)

    period = crud_periods.get_open_period(db, tenant_id, transaction_date)
    if not period:
        raise ValueError(NO_OPEN_PERIOD_MESSAGE)

    account_ids = {line.account_id for line in lines}
    accounts = {
        a.id: a for a in db.query(ChartOfAccounts).filter(
            ChartOfAccounts.id.in_(account_ids),
            ChartOfAccounts.tenant_id == tenant_id
        ).with_for_update().all()
    }
    for account_id in account_ids:
        account = accounts.get(account_id)
        if not account:
            raise ValueError(f"Account {account_id} not found")
        if not account.is_active:
            raise ValueError(f"Account {account.account_code} - {account.account_name} is inactive")

    entries = []
    for line in lines:
        account = accounts[line.account_id]
        debit = to_money(line.debit_amount)
        credit = to_money(line.credit_amount)
        account.current_balance = to_money(account.current_balance) + signed_movement(account.account_type, debit, credit)
        account.updated_by = user_id

        entry = GeneralLedger(
            tenant_id=tenant_id,
            account_id=account.id,
            financial_period_id=period.id,
            transaction_date=transaction_date,
            description=line.description or description,
            reference_type=reference_type,
            reference_id=reference_id,
            debit_amount=debit,
            credit_amount=credit,
            balance=account.current_balance,
            is_gst_applicable=line.is_gst_applicable,
            gst_rate=line.gst_rate,
            gst_amount=to_money(line.gst_amount) if line.gst_amount is not None else None,
            created_by=user_id,
        )
        db.add(entry)
        entries.append(entry)

    db.flush()
    logger.info(f"Posted {reference_type} #{reference_id} ({len(entries)} lines, {total}) for tenant {tenant_id}")
    return entries


def reverse_transaction(db: Session, tenant_id: str, reference_type: str, reference_id: int,
                        reversal_reference_type: str, reversal_reference_id: int, transaction_date: date,
                        description: str = None, user_id: str = None) -> List[GeneralLedger]:
    """Post the mirror image of an earlier posting; the original rows stay untouched."""
    original = get_entries_for_reference(db, tenant_id, reference_type, reference_id)
    if not original:
        raise ValueError(f"No ledger entries found for {reference_type} #{reference_id}")

    lines = [
        LedgerLine(
            account_id=entry.account_id,
            debit_amount=entry.credit_amount,
            credit_amount=entry.debit_amount,
            description=description or f"Reversal of {entry.description or reference_type}",
            is_gst_applicable=entry.is_gst_applicable,
            gst_rate=entry.gst_rate,
            gst_amount=entry.gst_amount,
        )
        for entry in original
    ]
    return post_transaction(db, tenant_id, transaction_date, lines, reversal_reference_type,
                            reversal_reference_id, description, user_id)


def get_entries_for_reference(db: Session, tenant_id: str, reference_type: str, reference_id: int) -> List[GeneralLedger]:
    return db.query(GeneralLedger).filter(
        GeneralLedger.tenant_id == tenant_id,
        GeneralLedger.reference_type == reference_type,
        GeneralLedger.reference_id == reference_id
    ).order_by(GeneralLedger.id).all()


def movement_between(db: Session, account: ChartOfAccounts, start_date: Optional[date] = None,
                     end_date: Optional[date] = None) -> Decimal:
    """Signed balance movement of an account over an inclusive date range."""
    query = db.query(
        func.coalesce(func.sum(GeneralLedger.debit_amount), 0),
        func.coalesce(func.sum(GeneralLedger.credit_amount), 0),
    ).filter(
        GeneralLedger.tenant_id == account.tenant_id,
        GeneralLedger.account_id == account.id
    )
    if start_date:
        query = query.filter(GeneralLedger.transaction_date >= start_date)
    if end_date:
        query = query.filter(GeneralLedger.transaction_date <= end_date)
    debit, credit = query.one()
    return signed_movement(account.account_type, debit, credit)


def balance_as_of(db: Session, account: ChartOfAccounts, as_of_date: date) -> Decimal:
    """Opening balance plus every movement dated on or before as_of_date."""
    return to_money(account.opening_balance) + movement_between(db, account, end_date=as_of_date)


def get_ledger_entries(db: Session, tenant_id: str, account_id: Optional[int] = None,
                       start_date: Optional[date] = None, end_date: Optional[date] = None,
                       reference_type: Optional[str] = None) -> List[GeneralLedger]:
    query = db.query(GeneralLedger).options(joinedload(GeneralLedger.account)).filter(
        GeneralLedger.tenant_id == tenant_id
    )
    if account_id:
        query = query.filter(GeneralLedger.account_id == account_id)
    if start_date:
        query = query.filter(GeneralLedger.transaction_date >= start_date)
    if end_date:
        query = query.filter(GeneralLedger.transaction_date <= end_date)
    if reference_type:
        query = query.filter(GeneralLedger.reference_type == reference_type)
    return query.order_by(GeneralLedger.transaction_date, GeneralLedger.id).all()


def get_ledger_view(db: Session, tenant_id: str, account_id: Optional[int] = None,
                    start_date: Optional[date] = None, end_date: Optional[date] = None) -> LedgerView:
    """
    Ledger rows for a range with opening/closing balance and debit/credit totals.

    Opening and closing balances only make sense for a single account, so they
    are None when account_id is omitted.
    """
    account = None
    if account_id:
        account = db.query(ChartOfAccounts).filter(
            ChartOfAccounts.id == account_id,
            ChartOfAccounts.tenant_id == tenant_id
        ).first()
        if not account:
            return None

    entries = get_ledger_entries(db, tenant_id, account_id, start_date, end_date)
    total_debits = sum((to_money(e.debit_amount) for e in entries), ZERO)
    total_credits = sum((to_money(e.credit_amount) for e in entries), ZERO)

    opening_balance = closing_balance = None
    if account:
        if start_date:
            opening_balance = balance_as_of(db, account, start_date - timedelta(days=1))
        else:
            opening_balance = to_money(account.opening_balance)
        # Running balance over the range; snapshots can be out of date order when documents are back-dated
        closing_balance = opening_balance + signed_movement(account.account_type, total_debits, total_credits)

    return LedgerView(
        account_id=account.id if account else None,
        account_code=account.account_code if account else None,
        account_name=account.account_name if account else None,
        account_type=account.account_type if account else None,
        start_date=start_date,
        end_date=end_date,
        opening_balance=opening_balance,
        closing_balance=closing_balance,
        total_debits=total_debits,
        total_credits=total_credits,
        entries=entries,
    )
