from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.financial_settings import FinancialSettings, FinancialSettingsUpdate, DefaultAccount
from crud import financial_settings as crud_settings
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_user_identifier

router = APIRouter(
    prefix="/financial-settings",
    tags=["Financial Settings"],
)
logger = logging.getLogger(__name__)

@router.get("/", response_model=FinancialSettings)
def get_settings(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """Default posting accounts; the default chart is seeded on first read."""
    return crud_settings.get_financial_settings(db, tenant_id)

@router.get("/accounts", response_model=List[DefaultAccount])
def get_default_accounts(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_settings.get_default_accounts(db, tenant_id)

@router.put("/", response_model=FinancialSettings)
def update_settings(
    settings: FinancialSettingsUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        updated = crud_settings.update_financial_settings(db, settings, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    logger.info(f"Financial settings for tenant {tenant_id} updated by {get_user_identifier(user)}: "
                f"{sorted(settings.model_dump(exclude_unset=True))}")
    return updated
