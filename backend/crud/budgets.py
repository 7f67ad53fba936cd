from datetime import date
from decimal import Decimal
from typing import Optional
from sqlalchemy.orm import Session, joinedload
from models.budgets import Budget
from schemas.budgets import BudgetCreate, BudgetUpdate, BudgetVarianceRow, BudgetVarianceReport
from crud import chart_of_accounts as crud_accounts
from crud import general_ledger as crud_ledger
from crud.financial_periods import financial_year_bounds
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
from utils.formatting import to_money
import logging

logger = logging.getLogger(__name__)

def financial_year_range(financial_year: str):
    """'2024-25' -> (2024-04-01, 2025-03-31)"""
    return financial_year_bounds(date(int(financial_year[:4]), 4, 1))

def get_budget(db: Session, budget_id: int, tenant_id: str) -> Optional[Budget]:
    return db.query(Budget).filter(Budget.id == budget_id, Budget.tenant_id == tenant_id).first()

def get_budgets(db: Session, tenant_id: str, financial_year: str = None):
    query = db.query(Budget).options(joinedload(Budget.account)).filter(Budget.tenant_id == tenant_id)
    if financial_year:
        query = query.filter(Budget.financial_year == financial_year)
    return query.order_by(Budget.financial_year.desc(), Budget.account_id).all()

def create_budget(db: Session, budget: BudgetCreate, tenant_id: str, user_id: str = None) -> Budget:
    if not crud_accounts.get_account(db, budget.account_id, tenant_id):
        raise ValueError(f"Account {budget.account_id} not found")
    duplicate = db.query(Budget).filter(
        Budget.tenant_id == tenant_id,
        Budget.financial_year == budget.financial_year,
        Budget.account_id == budget.account_id
    ).first()
    if duplicate:
        raise ValueError(f"A budget for this account already exists for {budget.financial_year}")

    db_budget = Budget(**budget.model_dump(), tenant_id=tenant_id, created_by=user_id)
    db.add(db_budget)
    db.commit()
    db.refresh(db_budget)
    return db_budget

def update_budget(db: Session, budget_id: int, budget_update: BudgetUpdate, tenant_id: str, user_id: str):
    db_budget = get_budget(db, budget_id, tenant_id)
    if not db_budget:
        return None
    old_values = sqlalchemy_to_dict(db_budget)
    for key, value in budget_update.model_dump(exclude_unset=True).items():
        setattr(db_budget, key, value)
    db_budget.updated_by = user_id
    log_change(db, tenant_id, 'budgets', db_budget, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_budget)
    return db_budget

def delete_budget(db: Session, budget_id: int, tenant_id: str, user_id: str) -> bool:
    db_budget = get_budget(db, budget_id, tenant_id)
    if not db_budget:
        return False
    log_change(db, tenant_id, 'budgets', db_budget, user_id, 'DELETE', sqlalchemy_to_dict(db_budget))
    db.delete(db_budget)
    db.commit()
    return True

def get_budget_variance(db: Session, financial_year: str, tenant_id: str) -> BudgetVarianceReport:
    """Budget against the account's signed ledger movement inside the financial year."""
    start_date, end_date = financial_year_range(financial_year)
    rows = []
    for budget in get_budgets(db, tenant_id, financial_year):
        account = budget.account
        actual = crud_ledger.movement_between(db, account, start_date, end_date)
        budgeted = to_money(budget.budgeted_amount)
        utilisation = to_money(actual / budgeted * 100) if budgeted > 0 else Decimal("0.00")
        rows.append(BudgetVarianceRow(
            budget_id=budget.id,
            account_id=account.id,
            account_code=account.account_code,
            account_name=account.account_name,
            account_type=account.account_type,
            budgeted_amount=budgeted,
            actual_amount=actual,
            variance=budgeted - actual,
            utilisation_percent=utilisation,
        ))

    total_budgeted = sum((r.budgeted_amount for r in rows), Decimal("0.00"))
    total_actual = sum((r.actual_amount for r in rows), Decimal("0.00"))
    return BudgetVarianceReport(
        financial_year=financial_year,
        rows=rows,
        total_budgeted=total_budgeted,
        total_actual=total_actual,
        total_variance=total_budgeted - total_actual,
    )
