from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from models.masters import MasterDonationCategory
from schemas.masters import MasterName, MasterNameCreate, DonationCategory, DonationCategoryCreate
from crud import masters as crud_masters
from utils.tenancy import get_tenant_id
from utils.auth_utils import get_current_user, require_group, get_user_identifier

router = APIRouter(prefix="/masters", tags=["Masters"])

def _name_model(master: str):
    model = crud_masters.NAME_MASTERS.get(master)
    if model is None:
        raise HTTPException(status_code=404, detail=f"Unknown master table '{master}'")
    return model

@router.get("/donation-categories", response_model=List[DonationCategory])
def read_donation_categories(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    return crud_masters.get_master_entries(db, MasterDonationCategory, tenant_id, include_inactive)

@router.post("/donation-categories", response_model=DonationCategory, status_code=status.HTTP_201_CREATED)
def create_donation_category(
    category: DonationCategoryCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        return crud_masters.create_master_entry(db, MasterDonationCategory, category.model_dump(), tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/{master}", response_model=List[MasterName])
def read_master_entries(
    master: str,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    """Nakshatras, rashis or gotras for the devotee form dropdowns."""
    return crud_masters.get_master_entries(db, _name_model(master), tenant_id, include_inactive)

@router.post("/{master}", response_model=MasterName, status_code=status.HTTP_201_CREATED)
def create_master_entry(
    master: str,
    entry: MasterNameCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    model = _name_model(master)
    try:
        return crud_masters.create_master_entry(db, model, entry.model_dump(), tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
