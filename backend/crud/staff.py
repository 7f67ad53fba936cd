from sqlalchemy.orm import Session
from models.staff import Staff
from schemas.staff import StaffCreate, StaffUpdate
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict

def get_staff_member(db: Session, staff_id: int, tenant_id: str):
    return db.query(Staff).filter(Staff.id == staff_id, Staff.tenant_id == tenant_id).first()

def get_staff(db: Session, tenant_id: str, role: str = None, include_inactive: bool = False):
    query = db.query(Staff).filter(Staff.tenant_id == tenant_id)
    if role:
        query = query.filter(Staff.role == role)
    if not include_inactive:
        query = query.filter(Staff.is_active == True)
    return query.order_by(Staff.name).all()

def create_staff(db: Session, staff: StaffCreate, tenant_id: str, user_id: str = None):
    db_staff = Staff(**staff.model_dump(), tenant_id=tenant_id, created_by=user_id)
    db.add(db_staff)
    db.commit()
    db.refresh(db_staff)
    return db_staff

def update_staff(db: Session, staff_id: int, staff: StaffUpdate, tenant_id: str, user_id: str):
    db_staff = get_staff_member(db, staff_id, tenant_id)
    if not db_staff:
        return None
    old_values = sqlalchemy_to_dict(db_staff)
    for key, value in staff.model_dump(exclude_unset=True).items():
        setattr(db_staff, key, value)
    db_staff.updated_by = user_id
    log_change(db, tenant_id, 'staff', db_staff, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_staff)
    return db_staff

def delete_staff(db: Session, staff_id: int, tenant_id: str, user_id: str) -> bool:
    db_staff = get_staff_member(db, staff_id, tenant_id)
    if not db_staff:
        return False
    log_change(db, tenant_id, 'staff', db_staff, user_id, 'DELETE', sqlalchemy_to_dict(db_staff))
    db.delete(db_staff)
    db.commit()
    return True
