import logging
from typing import Optional
from sqlalchemy.orm import Session
from models.chart_of_accounts import ChartOfAccounts
from models.general_ledger import GeneralLedger
from models.bank_accounts import BankAccount
from models.financial_settings import FinancialSettings
from schemas.chart_of_accounts import ChartOfAccountsCreate, ChartOfAccountsUpdate
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS = [
    {"account_code": "1000", "account_name": "Cash", "account_type": "Asset"},
    {"account_code": "1100", "account_name": "Bank", "account_type": "Asset"},
    {"account_code": "1200", "account_name": "Accounts Receivable", "account_type": "Asset"},
    {"account_code": "1300", "account_name": "Inventory", "account_type": "Asset"},
    {"account_code": "1400", "account_name": "GST Input Credit", "account_type": "Asset"},
    {"account_code": "2000", "account_name": "Accounts Payable", "account_type": "Liability"},
    {"account_code": "2100", "account_name": "GST Payable", "account_type": "Liability"},
    {"account_code": "3000", "account_name": "General Fund", "account_type": "Equity"},
    {"account_code": "4000", "account_name": "Donation Income", "account_type": "Income"},
    {"account_code": "4100", "account_name": "Puja Income", "account_type": "Income"},
    {"account_code": "4200", "account_name": "Gurukul Sales", "account_type": "Income"},
    {"account_code": "4300", "account_name": "Other Income", "account_type": "Income"},
    {"account_code": "5000", "account_name": "Puja Expenses", "account_type": "Expense"},
    {"account_code": "5100", "account_name": "Salaries", "account_type": "Expense"},
    {"account_code": "5200", "account_name": "General Expenses", "account_type": "Expense"},
]

def get_account(db: Session, account_id: int, tenant_id: str) -> Optional[ChartOfAccounts]:
    return db.query(ChartOfAccounts).filter(
        ChartOfAccounts.id == account_id,
        ChartOfAccounts.tenant_id == tenant_id
    ).first()

def get_account_by_code(db: Session, account_code: str, tenant_id: str) -> Optional[ChartOfAccounts]:
    return db.query(ChartOfAccounts).filter(
        ChartOfAccounts.account_code == account_code,
        ChartOfAccounts.tenant_id == tenant_id
    ).first()

def get_accounts(db: Session, tenant_id: str, account_type: str = None, include_inactive: bool = False):
    query = db.query(ChartOfAccounts).filter(ChartOfAccounts.tenant_id == tenant_id)
    if not include_inactive:
        query = query.filter(ChartOfAccounts.is_active == True)
    if account_type:
        query = query.filter(ChartOfAccounts.account_type == account_type)
    return query.order_by(ChartOfAccounts.account_code).all()

def get_account_tree(db: Session, tenant_id: str):
    """Active accounts nested under their parents; returns the root nodes."""
    accounts = get_accounts(db, tenant_id)
    nodes = {a.id: {**sqlalchemy_to_dict(a), "children": []} for a in accounts}
    roots = []
    for account in accounts:
        node = nodes[account.id]
        if account.parent_account_id and account.parent_account_id in nodes:
            nodes[account.parent_account_id]["children"].append(node)
        else:
            roots.append(node)
    return roots

def is_account_in_use(db: Session, account_id: int, tenant_id: str) -> bool:
    in_ledger = db.query(GeneralLedger.id).filter(
        GeneralLedger.account_id == account_id,
        GeneralLedger.tenant_id == tenant_id
    ).first()
    if in_ledger:
        return True

    linked_bank = db.query(BankAccount.id).filter(
        BankAccount.ledger_account_id == account_id,
        BankAccount.tenant_id == tenant_id
    ).first()
    if linked_bank:
        return True

    settings = db.query(FinancialSettings).filter(FinancialSettings.tenant_id == tenant_id).first()
    if settings:
        for column in FinancialSettings.__table__.columns:
            if column.name.startswith("default_") and getattr(settings, column.name) == account_id:
                return True
    return False

def _validate_parent(db: Session, parent_account_id: Optional[int], tenant_id: str, account_id: Optional[int] = None):
    if parent_account_id is None:
        return
    if account_id is not None and parent_account_id == account_id:
        raise ValueError("An account cannot be its own parent")
    parent = get_account(db, parent_account_id, tenant_id)
    if not parent:
        raise ValueError(f"Parent account {parent_account_id} not found")
    if account_id is None:
        return

    # Walk up from the new parent; reaching this account means a cycle
    seen = {parent.id}
    ancestor_id = parent.parent_account_id
    while ancestor_id is not None and ancestor_id not in seen:
        if ancestor_id == account_id:
            raise ValueError(f"Account {parent.account_code} is already under this account and cannot be its parent")
        seen.add(ancestor_id)
        ancestor = get_account(db, ancestor_id, tenant_id)
        ancestor_id = ancestor.parent_account_id if ancestor else None

def create_account(db: Session, account: ChartOfAccountsCreate, tenant_id: str, user_id: str = None, commit: bool = True):
    if get_account_by_code(db, account.account_code, tenant_id):
        raise ValueError(f"Account with code {account.account_code} already exists")
    _validate_parent(db, account.parent_account_id, tenant_id)

    account_data = account.model_dump()
    # A new account starts life at its opening balance
    db_account = ChartOfAccounts(
        **account_data,
        current_balance=account.opening_balance,
        tenant_id=tenant_id,
        created_by=user_id,
    )
    db.add(db_account)
    if commit:
        db.commit()
        db.refresh(db_account)
    else:
        db.flush()
    return db_account

def update_account(db: Session, account_id: int, account_update: ChartOfAccountsUpdate, tenant_id: str, user_id: str):
    db_account = get_account(db, account_id, tenant_id)
    if not db_account:
        return None

    update_data = account_update.model_dump(exclude_unset=True)
    in_use = is_account_in_use(db, account_id, tenant_id)

    if 'account_type' in update_data and update_data['account_type'] != db_account.account_type and in_use:
        raise ValueError("Cannot change account type for an account that already has ledger entries or is a default account.")
    if update_data.get('is_active') is False and in_use:
        raise ValueError("Cannot deactivate an account that already has ledger entries or is a default account.")
    if 'parent_account_id' in update_data:
        _validate_parent(db, update_data['parent_account_id'], tenant_id, account_id)

    old_values = sqlalchemy_to_dict(db_account)
    for key, value in update_data.items():
        setattr(db_account, key, value)
    db_account.updated_by = user_id

    log_change(db, tenant_id, 'chart_of_accounts', db_account, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_account)
    return db_account

def deactivate_account(db: Session, account_id: int, tenant_id: str, user_id: str) -> bool:
    db_account = get_account(db, account_id, tenant_id)
    if not db_account:
        return False
    if is_account_in_use(db, account_id, tenant_id):
        raise ValueError("Cannot delete an account that already has ledger entries or is a default account.")

    old_values = sqlalchemy_to_dict(db_account)
    db_account.is_active = False
    db_account.updated_by = user_id
    log_change(db, tenant_id, 'chart_of_accounts', db_account, user_id, 'DELETE', old_values)
    db.commit()
    return True

def initialize_default_accounts(db: Session, tenant_id: str, user_id: str = None):
    """Seed the standard temple chart of accounts. Existing codes are left untouched."""
    created = []
    for account_data in DEFAULT_ACCOUNTS:
        if not get_account_by_code(db, account_data["account_code"], tenant_id):
            create_account(db, ChartOfAccountsCreate(**account_data), tenant_id, user_id=user_id, commit=False)
            created.append(account_data["account_code"])
    db.commit()
    if created:
        logger.info(f"Seeded default accounts {created} for tenant {tenant_id}")
    return created
