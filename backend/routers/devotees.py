from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, status
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from schemas.devotees import Devotee, DevoteeCreate, DevoteeUpdate, DevoteeImportResult
from crud import devotees as crud_devotees
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_user_identifier

router = APIRouter(prefix="/devotees", tags=["Devotees"])

@router.post("/", response_model=Devotee, status_code=status.HTTP_201_CREATED)
def create_devotee(
    devotee: DevoteeCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_devotees.create_devotee(db, devotee, tenant_id, get_user_identifier(user))

@router.get("/", response_model=List[Devotee])
def read_devotees(
    search: Optional[str] = None,
    event_source: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """Search by name, mobile number or devotee code."""
    return crud_devotees.get_devotees(db, tenant_id, search, event_source, skip, limit)

@router.post("/import", response_model=DevoteeImportResult)
async def import_devotees(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if not file.filename.endswith(('.xls', '.xlsx')):
        raise HTTPException(status_code=400, detail="Invalid file type. Please upload an Excel file.")
    contents = await file.read()
    try:
        return crud_devotees.import_devotees_excel(db, contents, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/{devotee_id}", response_model=Devotee)
def read_devotee(
    devotee_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_devotee = crud_devotees.get_devotee(db, devotee_id, tenant_id)
    if db_devotee is None:
        raise HTTPException(status_code=404, detail="Devotee not found")
    return db_devotee

@router.patch("/{devotee_id}", response_model=Devotee)
def update_devotee(
    devotee_id: int,
    devotee: DevoteeUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_devotee = crud_devotees.update_devotee(db, devotee_id, devotee, tenant_id, get_user_identifier(user))
    if db_devotee is None:
        raise HTTPException(status_code=404, detail="Devotee not found")
    return db_devotee

@router.delete("/{devotee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_devotee(
    devotee_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if not crud_devotees.delete_devotee(db, devotee_id, tenant_id, get_user_identifier(user)):
        raise HTTPException(status_code=404, detail="Devotee not found")
    return None
