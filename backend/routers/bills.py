from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging
from database import get_db
from schemas.bills import Bill, BillCreate, BillUpdate, BillPayment, BillPaymentCreate
from schemas.uploads import UploadUrlRequest, UploadUrlResponse
from models.bills import DocumentPaymentStatus
from crud import bills as crud_bills
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_user_identifier
from utils.s3_utils import generate_presigned_upload_url

router = APIRouter(
    prefix="/bills",
    tags=["Bills"],
)
logger = logging.getLogger(__name__)

@router.post("/", response_model=Bill, status_code=status.HTTP_201_CREATED)
def create_bill(
    bill: BillCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        return crud_bills.create_bill(db, bill, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[Bill])
def get_bills(
    vendor_id: Optional[int] = None,
    status_filter: Optional[DocumentPaymentStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_bills.get_bills(db, tenant_id, vendor_id, status_filter, start_date, end_date, skip, limit)

@router.get("/{bill_id}", response_model=Bill)
def get_bill(
    bill_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_bill = crud_bills.get_bill(db, bill_id, tenant_id)
    if not db_bill:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    return db_bill

@router.patch("/{bill_id}", response_model=Bill)
def update_bill(
    bill_id: int,
    bill_update: BillUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_bill = crud_bills.update_bill(db, bill_id, bill_update, tenant_id, get_user_identifier(user))
    if not db_bill:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    return db_bill

@router.delete("/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bill(
    bill_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        deleted = crud_bills.delete_bill(db, bill_id, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    return None

@router.post("/{bill_id}/payments", response_model=BillPayment, status_code=status.HTTP_201_CREATED)
def record_bill_payment(
    bill_id: int,
    payment: BillPaymentCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        db_payment = crud_bills.record_bill_payment(db, bill_id, payment, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not db_payment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    return db_payment

@router.post("/{bill_id}/attachment-upload-url", response_model=UploadUrlResponse)
def get_attachment_upload_url(
    bill_id: int,
    request: UploadUrlRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """Presigned PUT URL for the scanned bill. Save the returned s3_path on the bill afterwards."""
    if not crud_bills.get_bill(db, bill_id, tenant_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    try:
        return generate_presigned_upload_url(tenant_id, "bill-attachments", bill_id, request.filename)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RuntimeError as e:
        logger.exception(f"Could not create upload URL for bill {bill_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
