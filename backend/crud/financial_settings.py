from sqlalchemy.orm import Session
from models.financial_settings import FinancialSettings
from models.chart_of_accounts import ChartOfAccounts
from schemas.financial_settings import FinancialSettingsUpdate
from crud import chart_of_accounts as crud_accounts
import logging

logger = logging.getLogger(__name__)

# settings field -> (default account code, required account type)
DEFAULT_ACCOUNT_FIELDS = {
    'default_cash_account_id': ("1000", "Asset"),
    'default_bank_account_id': ("1100", "Asset"),
    'default_accounts_receivable_account_id': ("1200", "Asset"),
    'default_gst_input_account_id': ("1400", "Asset"),
    'default_accounts_payable_account_id': ("2000", "Liability"),
    'default_gst_payable_account_id': ("2100", "Liability"),
    'default_donation_income_account_id': ("4000", "Income"),
    'default_puja_income_account_id': ("4100", "Income"),
    'default_gurukul_sales_account_id': ("4200", "Income"),
    'default_other_income_account_id': ("4300", "Income"),
    'default_general_expense_account_id': ("5200", "Expense"),
}

def get_financial_settings(db: Session, tenant_id: str) -> FinancialSettings:
    """Load the tenant's settings, seeding the default chart and backfilling any unset default."""
    settings = db.query(FinancialSettings).filter(FinancialSettings.tenant_id == tenant_id).first()
    if settings and settings.is_initialized and all(getattr(settings, f) for f in DEFAULT_ACCOUNT_FIELDS):
        return settings

    logger.info(f"Initializing financial settings for tenant {tenant_id}")
    crud_accounts.initialize_default_accounts(db, tenant_id)

    if not settings:
        settings = FinancialSettings(tenant_id=tenant_id)
        db.add(settings)

    for field, (code, _) in DEFAULT_ACCOUNT_FIELDS.items():
        if not getattr(settings, field):
            account = crud_accounts.get_account_by_code(db, code, tenant_id)
            setattr(settings, field, account.id)

    settings.is_initialized = True
    db.commit()
    db.refresh(settings)
    return settings

def get_default_account(db: Session, tenant_id: str, field: str) -> ChartOfAccounts:
    settings = get_financial_settings(db, tenant_id)
    return crud_accounts.get_account(db, getattr(settings, field), tenant_id)

def update_financial_settings(db: Session, settings_update: FinancialSettingsUpdate, tenant_id: str, user_id: str) -> FinancialSettings:
    settings = get_financial_settings(db, tenant_id)
    update_data = settings_update.model_dump(exclude_unset=True)

    for field, account_id in update_data.items():
        if account_id is None:
            raise ValueError(f"'{field}' cannot be cleared")
        account = crud_accounts.get_account(db, account_id, tenant_id)
        if not account or not account.is_active:
            raise ValueError(f"Account ID {account_id} not found for this tenant.")
        expected_type = DEFAULT_ACCOUNT_FIELDS[field][1]
        if account.account_type != expected_type:
            raise ValueError(f"Account for '{field}' must be of type '{expected_type}', but got '{account.account_type}'.")

    for key, value in update_data.items():
        setattr(settings, key, value)
    settings.updated_by = user_id

    db.commit()
    db.refresh(settings)
    return settings

def get_default_accounts(db: Session, tenant_id: str) -> list:
    """Each default slot with the account currently assigned to it."""
    settings = get_financial_settings(db, tenant_id)
    defaults = []
    for field, (_, expected_type) in DEFAULT_ACCOUNT_FIELDS.items():
        account = crud_accounts.get_account(db, getattr(settings, field), tenant_id)
        defaults.append({
            "setting": field,
            "expected_type": expected_type,
            "account_id": account.id if account else None,
            "account_code": account.account_code if account else None,
            "account_name": account.account_name if account else None,
        })
    return defaults
