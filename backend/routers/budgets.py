from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from schemas.budgets import Budget, BudgetCreate, BudgetUpdate, BudgetVarianceReport, check_financial_year
from crud import budgets as crud_budgets
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_user_identifier

router = APIRouter(
    prefix="/budgets",
    tags=["Budgets"],
)

@router.post("/", response_model=Budget, status_code=status.HTTP_201_CREATED)
def create_budget(
    budget: BudgetCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        return crud_budgets.create_budget(db, budget, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[Budget])
def get_budgets(
    financial_year: Optional[str] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_budgets.get_budgets(db, tenant_id, financial_year)

@router.get("/variance", response_model=BudgetVarianceReport)
def get_budget_variance(
    financial_year: str,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        check_financial_year(financial_year)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return crud_budgets.get_budget_variance(db, financial_year, tenant_id)

@router.patch("/{budget_id}", response_model=Budget)
def update_budget(
    budget_id: int,
    budget_update: BudgetUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_budget = crud_budgets.update_budget(db, budget_id, budget_update, tenant_id, get_user_identifier(user))
    if not db_budget:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
    return db_budget

@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if not crud_budgets.delete_budget(db, budget_id, tenant_id, get_user_identifier(user)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
    return None
