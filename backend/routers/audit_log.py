from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from schemas.audit_log import AuditLog
from crud import audit_log as crud_audit_log
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group

router = APIRouter(prefix="/audit-log", tags=["Audit Log"])

@router.get("/", response_model=List[AuditLog])
def read_audit_log(
    table_name: Optional[str] = None,
    record_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """Change history for the temple, newest first."""
    return crud_audit_log.get_audit_logs(db, tenant_id, table_name, record_id, skip, limit)
