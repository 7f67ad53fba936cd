from typing import Optional
from sqlalchemy.orm import Session
from models.vendors import Vendor, VendorStatus
from models.audit_mixin import now_ist
from models.bills import Bill
from models.expenses import Expense
from schemas.vendors import VendorCreate, VendorUpdate
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
import logging

logger = logging.getLogger(__name__)

def get_vendor(db: Session, vendor_id: int, tenant_id: str) -> Optional[Vendor]:
    return db.query(Vendor).filter(Vendor.id == vendor_id, Vendor.tenant_id == tenant_id).first()

def get_vendors(db: Session, tenant_id: str, status: Optional[VendorStatus] = None, search: str = None,
                skip: int = 0, limit: int = 100):
    query = db.query(Vendor).filter(Vendor.tenant_id == tenant_id)
    if status:
        query = query.filter(Vendor.status == status)
    if search:
        pattern = f"%{search}%"
        query = query.filter(Vendor.vendor_name.ilike(pattern) | Vendor.vendor_code.ilike(pattern))
    return query.order_by(Vendor.vendor_name).offset(skip).limit(limit).all()

def create_vendor(db: Session, vendor: VendorCreate, tenant_id: str, user_id: str = None) -> Vendor:
    existing = db.query(Vendor).filter(
        Vendor.tenant_id == tenant_id,
        Vendor.vendor_code == vendor.vendor_code
    ).execution_options(include_deleted=True).first()
    if existing:
        raise ValueError(f"Vendor with code {vendor.vendor_code} already exists")

    db_vendor = Vendor(**vendor.model_dump(), tenant_id=tenant_id, created_by=user_id)
    db.add(db_vendor)
    db.commit()
    db.refresh(db_vendor)
    logger.info(f"Vendor '{db_vendor.vendor_name}' created by {user_id} for tenant {tenant_id}")
    return db_vendor

def update_vendor(db: Session, vendor_id: int, vendor: VendorUpdate, tenant_id: str, user_id: str):
    db_vendor = get_vendor(db, vendor_id, tenant_id)
    if not db_vendor:
        return None
    old_values = sqlalchemy_to_dict(db_vendor)
    for key, value in vendor.model_dump(exclude_unset=True).items():
        setattr(db_vendor, key, value)
    db_vendor.updated_by = user_id
    log_change(db, tenant_id, 'vendors', db_vendor, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_vendor)
    return db_vendor

def delete_vendor(db: Session, vendor_id: int, tenant_id: str, user_id: str) -> bool:
    db_vendor = get_vendor(db, vendor_id, tenant_id)
    if not db_vendor:
        return False
    has_documents = (
        db.query(Bill.id).filter(Bill.vendor_id == vendor_id, Bill.tenant_id == tenant_id).first()
        or db.query(Expense.id).filter(Expense.vendor_id == vendor_id, Expense.tenant_id == tenant_id).first()
    )
    if has_documents:
        raise ValueError("Cannot delete a vendor with bills or expenses. Set the status to Inactive instead.")

    old_values = sqlalchemy_to_dict(db_vendor)
    db_vendor.deleted_at = now_ist()
    db_vendor.deleted_by = user_id
    log_change(db, tenant_id, 'vendors', db_vendor, user_id, 'DELETE', old_values)
    db.commit()
    logger.info(f"Vendor '{db_vendor.vendor_name}' deleted by {user_id}")
    return True
