import logging
from sqlalchemy.orm import Session

from database import SessionLocal
from crud import donations as crud_donations
from crud import app_config as crud_app_config
from utils.receipt_utils import generate_donation_receipt
from utils.s3_utils import upload_bytes_to_s3

logger = logging.getLogger(__name__)

def archive_donation_receipt(donation_id: int, tenant_id: str):
    """
    Render the receipt for a completed donation and keep a copy in S3.

    Runs as a FastAPI background task after the donation is saved, so it opens
    its own session. The s3 path is stored on the donation.
    """
    logger.info(f"Archiving receipt for donation {donation_id} (tenant '{tenant_id}')")
    db: Session = SessionLocal()
    try:
        donation = crud_donations.get_donation(db, donation_id, tenant_id)
        if not donation:
            logger.warning(f"Donation {donation_id} not found for tenant '{tenant_id}', receipt not archived")
            return
        content = generate_donation_receipt(donation, crud_app_config.get_temple_profile(db, tenant_id))
        donation.receipt_s3_path = upload_bytes_to_s3(
            content, tenant_id, "receipts", donation.id, f"{donation.receipt_number}.pdf"
        )
        db.commit()
        logger.info(f"Receipt {donation.receipt_number} archived to {donation.receipt_s3_path}")
    except Exception as e:
        logger.error(f"Error archiving receipt for donation {donation_id}: {e}", exc_info=True)
        db.rollback()
    finally:
        db.close()
