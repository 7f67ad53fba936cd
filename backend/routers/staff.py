from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from database import get_db
from schemas.staff import Staff, StaffCreate, StaffUpdate
from crud import staff as crud_staff
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_user_identifier

router = APIRouter(prefix="/staff", tags=["Staff"])
logger = logging.getLogger(__name__)

@router.post("/", response_model=Staff, status_code=status.HTTP_201_CREATED)
def create_staff(
    staff: StaffCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_staff = crud_staff.create_staff(db, staff, tenant_id, get_user_identifier(user))
    logger.info(f"Staff member '{db_staff.name}' ({db_staff.role}) added by {get_user_identifier(user)}")
    return db_staff

@router.get("/", response_model=List[Staff])
def read_staff(
    role: Optional[str] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_staff.get_staff(db, tenant_id, role, include_inactive)

@router.get("/{staff_id}", response_model=Staff)
def read_staff_member(
    staff_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_staff = crud_staff.get_staff_member(db, staff_id, tenant_id)
    if db_staff is None:
        raise HTTPException(status_code=404, detail="Staff member not found")
    return db_staff

@router.patch("/{staff_id}", response_model=Staff)
def update_staff(
    staff_id: int,
    staff: StaffUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_staff = crud_staff.update_staff(db, staff_id, staff, tenant_id, get_user_identifier(user))
    if db_staff is None:
        raise HTTPException(status_code=404, detail="Staff member not found")
    return db_staff

@router.delete("/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_staff(
    staff_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if not crud_staff.delete_staff(db, staff_id, tenant_id, get_user_identifier(user)):
        raise HTTPException(status_code=404, detail="Staff member not found")
    return None
