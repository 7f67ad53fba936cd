import io
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging

from database import get_db
from models.donations import DonationPaymentStatus
from schemas.donations import Donation, DonationCreate, DonationUpdate, DonationStatusUpdate, DonationSummary
from schemas.uploads import DownloadUrlResponse
from crud import donations as crud_donations
from crud import app_config as crud_app_config
from tasks.receipt_tasks import archive_donation_receipt
from utils.receipt_utils import generate_donation_receipt
from utils.s3_utils import S3_ENABLED, generate_presigned_download_url
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_user_identifier

router = APIRouter(prefix="/donations", tags=["Donations"])
logger = logging.getLogger(__name__)

DONATION_NOT_FOUND = "Donation not found"

@router.post("/", response_model=Donation, status_code=status.HTTP_201_CREATED)
def create_donation(
    donation: DonationCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        db_donation = crud_donations.create_donation(db, donation, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if S3_ENABLED and db_donation.payment_status == DonationPaymentStatus.COMPLETED:
        background_tasks.add_task(archive_donation_receipt, db_donation.id, tenant_id)
    return db_donation

@router.get("/", response_model=List[Donation])
def read_donations(
    devotee_id: Optional[int] = None,
    category_id: Optional[int] = None,
    payment_status: Optional[DonationPaymentStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_donations.get_donations(db, tenant_id, devotee_id, category_id, payment_status, start_date, end_date, skip, limit)

@router.get("/summary", response_model=DonationSummary)
def read_donation_summary(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_donations.get_donation_summary(db, tenant_id, start_date, end_date)

@router.get("/{donation_id}", response_model=Donation)
def read_donation(
    donation_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_donation = crud_donations.get_donation(db, donation_id, tenant_id)
    if db_donation is None:
        raise HTTPException(status_code=404, detail=DONATION_NOT_FOUND)
    return db_donation

@router.patch("/{donation_id}", response_model=Donation)
def update_donation(
    donation_id: int,
    donation: DonationUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        db_donation = crud_donations.update_donation(db, donation_id, donation, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if db_donation is None:
        raise HTTPException(status_code=404, detail=DONATION_NOT_FOUND)
    return db_donation

@router.post("/{donation_id}/status", response_model=Donation)
def update_donation_status(
    donation_id: int,
    status_update: DonationStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """Complete a pending donation, mark it failed, or refund a completed one."""
    try:
        db_donation = crud_donations.update_donation_status(db, donation_id, status_update, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if db_donation is None:
        raise HTTPException(status_code=404, detail=DONATION_NOT_FOUND)
    if S3_ENABLED and db_donation.payment_status == DonationPaymentStatus.COMPLETED:
        background_tasks.add_task(archive_donation_receipt, db_donation.id, tenant_id)
    return db_donation

@router.get("/{donation_id}/receipt")
def download_receipt(
    donation_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_donation = crud_donations.get_donation(db, donation_id, tenant_id)
    if db_donation is None:
        raise HTTPException(status_code=404, detail=DONATION_NOT_FOUND)
    if db_donation.payment_status != DonationPaymentStatus.COMPLETED:
        raise HTTPException(status_code=400, detail="Receipts are only issued for completed donations")

    content = generate_donation_receipt(db_donation, crud_app_config.get_temple_profile(db, tenant_id))
    return StreamingResponse(
        io.BytesIO(content),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{db_donation.receipt_number}.pdf"'}
    )

@router.get("/{donation_id}/receipt-url", response_model=DownloadUrlResponse)
def get_archived_receipt_url(
    donation_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_donation = crud_donations.get_donation(db, donation_id, tenant_id)
    if db_donation is None:
        raise HTTPException(status_code=404, detail=DONATION_NOT_FOUND)
    if not db_donation.receipt_s3_path:
        raise HTTPException(status_code=404, detail="Receipt has not been archived yet")
    try:
        return {"download_url": generate_presigned_download_url(db_donation.receipt_s3_path)}
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RuntimeError as e:
        logger.exception(f"Could not sign receipt URL for donation {donation_id}")
        raise HTTPException(status_code=502, detail=str(e))

@router.delete("/{donation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_donation(
    donation_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        deleted = crud_donations.delete_donation(db, donation_id, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail=DONATION_NOT_FOUND)
    return None
