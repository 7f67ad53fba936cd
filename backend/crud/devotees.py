import io
import logging
from typing import Optional

import pandas as pd
from pydantic import ValidationError
from sqlalchemy.orm import Session

from models.devotees import Devotee
from models.audit_mixin import now_ist
from schemas.devotees import DevoteeCreate, DevoteeUpdate
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
from utils.document_numbers import generate_document_number, DEVOTEE_PREFIX

logger = logging.getLogger(__name__)

# Spreadsheet header (lowercased) -> Devotee field
IMPORT_COLUMNS = {
    "first name": "first_name",
    "first_name": "first_name",
    "last name": "last_name",
    "last_name": "last_name",
    "mobile": "mobile_number",
    "mobile number": "mobile_number",
    "mobile_number": "mobile_number",
    "phone": "mobile_number",
    "email": "email",
    "gender": "gender",
    "dob": "date_of_birth",
    "date of birth": "date_of_birth",
    "date_of_birth": "date_of_birth",
    "address": "address",
    "city": "city",
    "state": "state",
    "country": "country",
    "pincode": "pincode",
    "gotra": "gotra",
    "nakshatra": "nakshatra",
    "rashi": "rashi",
    "occupation": "occupation",
    "membership type": "membership_type",
    "notes": "notes",
}


def get_devotee(db: Session, devotee_id: int, tenant_id: str) -> Optional[Devotee]:
    return db.query(Devotee).filter(Devotee.id == devotee_id, Devotee.tenant_id == tenant_id).first()


def get_devotees(db: Session, tenant_id: str, search: str = None, event_source: str = None,
                 skip: int = 0, limit: int = 100):
    query = db.query(Devotee).filter(Devotee.tenant_id == tenant_id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            Devotee.first_name.ilike(pattern)
            | Devotee.last_name.ilike(pattern)
            | Devotee.mobile_number.ilike(pattern)
            | Devotee.devotee_code.ilike(pattern)
        )
    if event_source:
        query = query.filter(Devotee.event_source == event_source)
    return query.order_by(Devotee.created_at.desc(), Devotee.id.desc()).offset(skip).limit(limit).all()


def find_by_mobile(db: Session, tenant_id: str, mobile_number: str) -> Optional[Devotee]:
    return db.query(Devotee).filter(
        Devotee.tenant_id == tenant_id,
        Devotee.mobile_number == mobile_number
    ).order_by(Devotee.id).first()


def build_devotee(db: Session, devotee: DevoteeCreate, tenant_id: str, user_id: str = None) -> Devotee:
    """Add a devotee with the next DEV code to the session without committing."""
    db_devotee = Devotee(
        **devotee.model_dump(),
        devotee_code=generate_document_number(db, Devotee.devotee_code, tenant_id, DEVOTEE_PREFIX),
        tenant_id=tenant_id,
        created_by=user_id,
    )
    db.add(db_devotee)
    db.flush()
    return db_devotee


def create_devotee(db: Session, devotee: DevoteeCreate, tenant_id: str, user_id: str = None) -> Devotee:
    db_devotee = build_devotee(db, devotee, tenant_id, user_id)
    db.commit()
    db.refresh(db_devotee)
    logger.info(f"Devotee {db_devotee.devotee_code} ({db_devotee.full_name}) created by {user_id} for tenant {tenant_id}")
    return db_devotee


def update_devotee(db: Session, devotee_id: int, devotee: DevoteeUpdate, tenant_id: str, user_id: str):
    db_devotee = get_devotee(db, devotee_id, tenant_id)
    if not db_devotee:
        return None
    old_values = sqlalchemy_to_dict(db_devotee)
    for key, value in devotee.model_dump(exclude_unset=True).items():
        setattr(db_devotee, key, value)
    db_devotee.updated_by = user_id
    log_change(db, tenant_id, 'devotees', db_devotee, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_devotee)
    return db_devotee


def delete_devotee(db: Session, devotee_id: int, tenant_id: str, user_id: str) -> bool:
    db_devotee = get_devotee(db, devotee_id, tenant_id)
    if not db_devotee:
        return False
    old_values = sqlalchemy_to_dict(db_devotee)
    db_devotee.deleted_at = now_ist()
    db_devotee.deleted_by = user_id
    log_change(db, tenant_id, 'devotees', db_devotee, user_id, 'DELETE', old_values)
    db.commit()
    logger.info(f"Devotee {db_devotee.devotee_code} deleted by {user_id}")
    return True


def _row_to_payload(row) -> dict:
    payload = {}
    for column, field in IMPORT_COLUMNS.items():
        if column not in row.index or pd.isna(row[column]):
            continue
        value = row[column]
        if field == "date_of_birth":
            value = pd.to_datetime(value, dayfirst=True).date()
        elif field in ("mobile_number", "pincode") and isinstance(value, float):
            # Excel stores phone numbers as floats
            value = str(int(value))
        else:
            value = str(value).strip()
        payload[field] = value
    return payload


def import_devotees_excel(db: Session, contents: bytes, tenant_id: str, user_id: str = None) -> dict:
    """
    Bulk import from a workbook whose first row is a header. Each row is
    validated like a manual entry; invalid rows are skipped and reported.
    """
    df = pd.read_excel(io.BytesIO(contents))
    df.columns = [str(c).strip().lower() for c in df.columns]
    if "first name" not in df.columns and "first_name" not in df.columns:
        raise ValueError("The sheet must have a 'First Name' column")

    results = []
    imported = 0
    for row_idx, row in df.iterrows():
        excel_row = row_idx + 2
        try:
            devotee = DevoteeCreate(**_row_to_payload(row))
        except (ValidationError, ValueError) as e:
            logger.warning(f"Skipping devotee import row {excel_row} for tenant {tenant_id}: {e}")
            results.append({"row": excel_row, "status": "Skipped", "error": str(e).splitlines()[0]})
            continue
        db_devotee = build_devotee(db, devotee, tenant_id, user_id)
        results.append({"row": excel_row, "status": "Imported", "devotee_code": db_devotee.devotee_code})
        imported += 1

    db.commit()
    logger.info(f"Devotee import for tenant {tenant_id}: {imported} imported, {len(results) - imported} skipped")
    return {"imported": imported, "skipped": len(results) - imported, "results": results}
