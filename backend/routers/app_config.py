from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.app_config import AppConfigCreate, AppConfigUpdate, AppConfigOut
from crud import app_config as crud_app_config
from crud import chart_of_accounts as crud_accounts
from crud import financial_periods as crud_periods
from crud import financial_settings as crud_settings
from utils.auth_utils import get_current_user, get_user_identifier, require_group
from utils.tenancy import get_tenant_id

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/configurations/", response_model=AppConfigOut, status_code=status.HTTP_201_CREATED)
def create_config(
    config: AppConfigCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin"])),
    tenant_id: str = Depends(get_tenant_id)
):
    try:
        return crud_app_config.create_config(db, config, tenant_id, user_id=get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/configurations/", response_model=List[AppConfigOut])
def get_configs(
    name: Optional[str] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    configs = crud_app_config.get_config(db, tenant_id, name=name)
    # Always return a list, even if empty
    if name:
        return [configs] if configs else []
    return configs

@router.patch("/configurations/{name}/", response_model=AppConfigOut)
def update_config(
    name: str,
    config: AppConfigUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin"])),
    tenant_id: str = Depends(get_tenant_id)
):
    updated = crud_app_config.update_config_by_name(db, name, config, tenant_id, get_user_identifier(user))
    if not updated:
        raise HTTPException(status_code=404, detail="Configuration not found")
    return updated

@router.delete("/configurations/{name}/", status_code=status.HTTP_204_NO_CONTENT)
def delete_config(
    name: str,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin"])),
    tenant_id: str = Depends(get_tenant_id)
):
    if not crud_app_config.delete_config_by_name(db, name, tenant_id, get_user_identifier(user)):
        raise HTTPException(status_code=404, detail="Configuration not found")
    return None


@router.get("/tenants/configs-initialized", tags=["Tenants"])
def are_tenant_configurations_initialized(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """
    Checks if the default application configurations are initialized for a tenant.
    """
    return {"configs_initialized": not crud_app_config.missing_default_configs(db, tenant_id)}


@router.post("/tenants/initialize-configs", status_code=status.HTTP_201_CREATED, tags=["Tenants"])
def initialize_tenant_configurations(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """
    Initializes a new tenant with a default set of application configurations.
    This is idempotent; it will not overwrite existing configurations for the tenant.
    """
    created = crud_app_config.initialize_default_configs(db, tenant_id, get_user_identifier(user))
    if not created:
        return {"message": f"All default configurations already exist for tenant '{tenant_id}'."}
    return {"message": f"Successfully initialized default configurations for tenant '{tenant_id}'.", "new_configs": created}


@router.post("/tenants/initialize-accounting", status_code=status.HTTP_201_CREATED, tags=["Tenants"])
def initialize_tenant_accounting(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """
    Seeds the default temple chart of accounts, the default account settings and
    an open period for the current financial year. Safe to call repeatedly.
    """
    user_id = get_user_identifier(user)
    created_accounts = crud_accounts.initialize_default_accounts(db, tenant_id, user_id)
    crud_settings.get_financial_settings(db, tenant_id)
    period = crud_periods.ensure_current_year_period(db, tenant_id, user_id)
    logger.info(f"Accounting initialized for tenant '{tenant_id}' by {user_id}: {len(created_accounts)} accounts created")
    return {
        "accounts_created": created_accounts,
        "open_period": period.period_name,
    }
