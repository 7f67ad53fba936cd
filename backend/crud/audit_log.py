from typing import Optional
from sqlalchemy.orm import Session
from models.audit_log import AuditLog
from schemas.audit_log import AuditLogCreate
from utils import sqlalchemy_to_dict

def create_audit_log(db: Session, log_entry: AuditLogCreate, commit: bool = True):
    """Persist an audit row. Pass commit=False to keep it inside the caller's transaction."""
    db_log_entry = AuditLog(**log_entry.model_dump())
    db.add(db_log_entry)
    if commit:
        db.commit()
        db.refresh(db_log_entry)
    else:
        db.flush()
    return db_log_entry

def log_change(db: Session, tenant_id: str, table_name: str, record, changed_by: str, action: str,
               old_values: Optional[dict] = None, commit: bool = False):
    """Audit a change to `record`, snapshotting its current column values as new_values."""
    return create_audit_log(db, AuditLogCreate(
        tenant_id=tenant_id,
        table_name=table_name,
        record_id=record.id,
        changed_by=changed_by,
        action=action,
        old_values=old_values or {},
        new_values=sqlalchemy_to_dict(record),
    ), commit=commit)

def get_audit_logs(db: Session, tenant_id: str, table_name: Optional[str] = None, record_id: Optional[int] = None,
                   skip: int = 0, limit: int = 100):
    query = db.query(AuditLog).filter(AuditLog.tenant_id == tenant_id)
    if table_name:
        query = query.filter(AuditLog.table_name == table_name)
    if record_id is not None:
        query = query.filter(AuditLog.record_id == record_id)
    return query.order_by(AuditLog.changed_at.desc(), AuditLog.id.desc()).offset(skip).limit(limit).all()
