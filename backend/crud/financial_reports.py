from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.chart_of_accounts import ChartOfAccounts
from models.general_ledger import GeneralLedger
from schemas.financial_reports import (
    ReportLine, TrialBalance, TrialBalanceRow, BalanceSheet, ProfitAndLoss, CashFlow, GSTRateSummary, GSTReport
)
from crud import general_ledger as crud_ledger
from crud import financial_settings as crud_settings
from utils.formatting import to_money

ZERO = Decimal("0.00")


def _movements_by_account(db: Session, tenant_id: str, start_date: Optional[date] = None,
                          end_date: Optional[date] = None) -> Dict[int, Tuple[Decimal, Decimal]]:
    """(Σdebit, Σcredit) per account over an inclusive date range, in one grouped query."""
    query = db.query(
        GeneralLedger.account_id,
        func.coalesce(func.sum(GeneralLedger.debit_amount), 0),
        func.coalesce(func.sum(GeneralLedger.credit_amount), 0),
    ).filter(GeneralLedger.tenant_id == tenant_id)
    if start_date:
        query = query.filter(GeneralLedger.transaction_date >= start_date)
    if end_date:
        query = query.filter(GeneralLedger.transaction_date <= end_date)
    rows = query.group_by(GeneralLedger.account_id).all()
    return {account_id: (to_money(debit), to_money(credit)) for account_id, debit, credit in rows}


def _balances(db: Session, tenant_id: str, accounts, as_of_date: Optional[date]) -> Dict[int, Decimal]:
    if as_of_date is None:
        return {a.id: to_money(a.current_balance) for a in accounts}
    movements = _movements_by_account(db, tenant_id, end_date=as_of_date)
    return {
        a.id: to_money(a.opening_balance) + crud_ledger.signed_movement(a.account_type, *movements.get(a.id, (ZERO, ZERO)))
        for a in accounts
    }


def _active_accounts(db: Session, tenant_id: str, account_types=None):
    query = db.query(ChartOfAccounts).filter(
        ChartOfAccounts.tenant_id == tenant_id,
        ChartOfAccounts.is_active == True
    )
    if account_types:
        query = query.filter(ChartOfAccounts.account_type.in_(account_types))
    return query.order_by(ChartOfAccounts.account_code).all()


def _line(account: ChartOfAccounts, amount: Decimal) -> ReportLine:
    return ReportLine(account_id=account.id, account_code=account.account_code,
                      account_name=account.account_name, amount=amount)


def get_trial_balance(db: Session, tenant_id: str, as_of_date: Optional[date] = None) -> TrialBalance:
    accounts = _active_accounts(db, tenant_id)
    balances = _balances(db, tenant_id, accounts, as_of_date)

    rows = []
    total_debit = total_credit = ZERO
    for account in accounts:
        balance = balances[account.id]
        debit = credit = ZERO
        # A negative balance shows on the side opposite to the account's normal side
        if crud_ledger.is_debit_normal(account.account_type):
            if balance >= 0:
                debit = balance
            else:
                credit = -balance
        else:
            if balance >= 0:
                credit = balance
            else:
                debit = -balance
        if debit == 0 and credit == 0:
            continue
        rows.append(TrialBalanceRow(
            account_id=account.id,
            account_code=account.account_code,
            account_name=account.account_name,
            account_type=account.account_type,
            debit=debit,
            credit=credit,
        ))
        total_debit += debit
        total_credit += credit

    return TrialBalance(
        as_of_date=as_of_date,
        rows=rows,
        total_debit=total_debit,
        total_credit=total_credit,
        is_balanced=total_debit == total_credit,
    )


def get_balance_sheet(db: Session, as_of_date: date, tenant_id: str) -> BalanceSheet:
    accounts = _active_accounts(db, tenant_id)
    balances = _balances(db, tenant_id, accounts, as_of_date)

    sections = defaultdict(list)
    for account in accounts:
        sections[account.account_type].append(account)

    assets = [_line(a, balances[a.id]) for a in sections["Asset"]]
    liabilities = [_line(a, balances[a.id]) for a in sections["Liability"]]
    equity = [_line(a, balances[a.id]) for a in sections["Equity"]]

    total_income = sum((balances[a.id] for a in sections["Income"]), ZERO)
    total_expenses = sum((balances[a.id] for a in sections["Expense"]), ZERO)
    current_surplus = total_income - total_expenses
    equity.append(ReportLine(account_name="Current Surplus", amount=current_surplus))

    total_assets = sum((line.amount for line in assets), ZERO)
    total_liabilities = sum((line.amount for line in liabilities), ZERO)
    total_equity = sum((line.amount for line in equity), ZERO)

    return BalanceSheet(
        as_of_date=as_of_date,
        assets=assets,
        liabilities=liabilities,
        equity=equity,
        current_surplus=current_surplus,
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        total_equity=total_equity,
        is_balanced=total_assets == total_liabilities + total_equity,
    )


def get_profit_and_loss(db: Session, start_date: date, end_date: date, tenant_id: str) -> ProfitAndLoss:
    if start_date > end_date:
        raise ValueError("start_date must be on or before end_date")
    accounts = _active_accounts(db, tenant_id, ["Income", "Expense"])
    movements = _movements_by_account(db, tenant_id, start_date, end_date)

    income, expenses = [], []
    for account in accounts:
        debit, credit = movements.get(account.id, (ZERO, ZERO))
        amount = crud_ledger.signed_movement(account.account_type, debit, credit)
        if amount == 0:
            continue
        (income if account.account_type == "Income" else expenses).append(_line(account, amount))

    total_income = sum((line.amount for line in income), ZERO)
    total_expenses = sum((line.amount for line in expenses), ZERO)
    return ProfitAndLoss(
        start_date=start_date,
        end_date=end_date,
        income=income,
        expenses=expenses,
        total_income=total_income,
        total_expenses=total_expenses,
        net_surplus=total_income - total_expenses,
    )


def get_cash_flow(db: Session, start_date: date, end_date: date, tenant_id: str) -> CashFlow:
    if start_date > end_date:
        raise ValueError("start_date must be on or before end_date")
    cash_account = crud_settings.get_default_account(db, tenant_id, 'default_cash_account_id')

    entries = crud_ledger.get_ledger_entries(db, tenant_id, cash_account.id, start_date, end_date)
    inflows = sum((to_money(e.debit_amount) for e in entries), ZERO)
    outflows = sum((to_money(e.credit_amount) for e in entries), ZERO)
    opening_cash = crud_ledger.balance_as_of(db, cash_account, start_date - timedelta(days=1))
    net_change = inflows - outflows

    return CashFlow(
        start_date=start_date,
        end_date=end_date,
        account_id=cash_account.id,
        account_code=cash_account.account_code,
        account_name=cash_account.account_name,
        opening_cash=opening_cash,
        inflows=inflows,
        outflows=outflows,
        net_change=net_change,
        closing_cash=opening_cash + net_change,
        entries=entries,
    )


def get_gst_report(db: Session, start_date: date, end_date: date, tenant_id: str) -> GSTReport:
    """
    GST summary by rate. Tax is split evenly into CGST and SGST; IGST is not
    tracked separately and is always zero.
    """
    if start_date > end_date:
        raise ValueError("start_date must be on or before end_date")
    entries = db.query(GeneralLedger).filter(
        GeneralLedger.tenant_id == tenant_id,
        GeneralLedger.is_gst_applicable == True,
        GeneralLedger.transaction_date >= start_date,
        GeneralLedger.transaction_date <= end_date
    ).all()

    by_rate = defaultdict(lambda: {"taxable": ZERO, "tax": ZERO})
    for entry in entries:
        rate = to_money(entry.gst_rate)
        gst_amount = to_money(entry.gst_amount)
        by_rate[rate]["taxable"] += to_money(entry.debit_amount) + to_money(entry.credit_amount) - gst_amount
        by_rate[rate]["tax"] += gst_amount

    rates = []
    for rate in sorted(by_rate):
        tax = by_rate[rate]["tax"]
        half = to_money(tax / 2)
        rates.append(GSTRateSummary(
            gst_rate=rate,
            taxable_value=by_rate[rate]["taxable"],
            cgst=half,
            sgst=tax - half,
            igst=ZERO,
            total_tax=tax,
        ))

    return GSTReport(
        start_date=start_date,
        end_date=end_date,
        rates=rates,
        total_taxable_value=sum((r.taxable_value for r in rates), ZERO),
        total_cgst=sum((r.cgst for r in rates), ZERO),
        total_sgst=sum((r.sgst for r in rates), ZERO),
        total_igst=ZERO,
        total_tax=sum((r.total_tax for r in rates), ZERO),
    )
