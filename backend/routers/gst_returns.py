from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from schemas.gst_returns import GSTReturn, GSTReturnUpsert
from crud import gst_returns as crud_gst_returns
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_user_identifier

router = APIRouter(
    prefix="/gst-returns",
    tags=["GST Returns"],
)

@router.put("/", response_model=GSTReturn)
def save_gst_return(
    gst_return: GSTReturnUpsert,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_gst_returns.upsert_gst_return(db, gst_return, tenant_id, get_user_identifier(user))

@router.get("/", response_model=List[GSTReturn])
def get_gst_returns(
    return_type: Optional[str] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_gst_returns.get_gst_returns(db, tenant_id, return_type)

@router.get("/{return_id}", response_model=GSTReturn)
def get_gst_return(
    return_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_return = crud_gst_returns.get_gst_return(db, return_id, tenant_id)
    if not db_return:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="GST return not found")
    return db_return
