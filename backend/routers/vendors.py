from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.vendors import Vendor, VendorCreate, VendorUpdate
from models.vendors import VendorStatus
from crud import vendors as crud_vendors
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_user_identifier

router = APIRouter(prefix="/vendors", tags=["Vendors"])
logger = logging.getLogger(__name__)

@router.post("/", response_model=Vendor, status_code=status.HTTP_201_CREATED)
def create_vendor(
    vendor: VendorCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """Create a new vendor."""
    try:
        return crud_vendors.create_vendor(db, vendor, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/", response_model=List[Vendor])
def read_vendors(
    skip: int = 0,
    limit: int = 100,
    status: Optional[VendorStatus] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """Retrieve a list of vendors, with optional filtering by status or name/code."""
    return crud_vendors.get_vendors(db, tenant_id, status, search, skip, limit)

@router.get("/{vendor_id}", response_model=Vendor)
def read_vendor(
    vendor_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_vendor = crud_vendors.get_vendor(db, vendor_id, tenant_id)
    if db_vendor is None:
        raise HTTPException(status_code=404, detail="Vendor not found")
    return db_vendor

@router.patch("/{vendor_id}", response_model=Vendor)
def update_vendor(
    vendor_id: int,
    vendor: VendorUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_vendor = crud_vendors.update_vendor(db, vendor_id, vendor, tenant_id, get_user_identifier(user))
    if db_vendor is None:
        raise HTTPException(status_code=404, detail="Vendor not found")
    logger.info(f"Vendor '{db_vendor.vendor_name}' updated by {get_user_identifier(user)}")
    return db_vendor

@router.delete("/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vendor(
    vendor_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        deleted = crud_vendors.delete_vendor(db, vendor_id, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Vendor not found")
    return None
