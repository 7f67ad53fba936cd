from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from schemas.financial_periods import FinancialPeriod, FinancialPeriodCreate, FinancialPeriodUpdate
from crud import financial_periods as crud_periods
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_user_identifier

router = APIRouter(
    prefix="/financial-periods",
    tags=["Financial Periods"],
)

@router.post("/", response_model=FinancialPeriod, status_code=status.HTTP_201_CREATED)
def create_period(
    period: FinancialPeriodCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        return crud_periods.create_period(db, period, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[FinancialPeriod])
def get_periods(
    status_filter: Optional[str] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_periods.get_periods(db, tenant_id, status_filter)

@router.get("/current", response_model=FinancialPeriod)
def get_current_open_period(
    on_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    period = crud_periods.get_open_period(db, tenant_id, on_date or date.today())
    if not period:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No open financial period found")
    return period

@router.patch("/{period_id}", response_model=FinancialPeriod)
def update_period(
    period_id: int,
    period_update: FinancialPeriodUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        period = crud_periods.update_period(db, period_id, period_update, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not period:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Financial period not found")
    return period

def _set_status(db: Session, period_id: int, new_status: str, tenant_id: str, user: dict):
    try:
        period = crud_periods.set_period_status(db, period_id, new_status, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not period:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Financial period not found")
    return period

@router.post("/{period_id}/close", response_model=FinancialPeriod)
def close_period(
    period_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return _set_status(db, period_id, crud_periods.CLOSED, tenant_id, user)

@router.post("/{period_id}/reopen", response_model=FinancialPeriod)
def reopen_period(
    period_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return _set_status(db, period_id, crud_periods.OPEN, tenant_id, user)
