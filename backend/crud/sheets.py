import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy.orm import Session

from models.saved_sheets import SavedSheet, GoogleToken
from schemas.sheets import GoogleTokenStore
from utils.sheets_client import SheetsClient
from utils.sheet_transformer import transform_sheet_data

logger = logging.getLogger(__name__)

ALL_TABS = "ALL_TABS"


def get_google_token(db: Session, user_id: int) -> Optional[GoogleToken]:
    return db.query(GoogleToken).filter(GoogleToken.user_id == user_id).first()


def store_google_token(db: Session, user_id: int, token: GoogleTokenStore) -> GoogleToken:
    db_token = get_google_token(db, user_id)
    if not db_token:
        db_token = GoogleToken(user_id=user_id)
        db.add(db_token)
    db_token.provider_token = token.provider_token
    if token.provider_refresh_token:
        db_token.provider_refresh_token = token.provider_refresh_token
    db_token.expires_at = token.expires_at
    db.commit()
    db.refresh(db_token)
    logger.info(f"Google token stored for user {user_id}")
    return db_token


def fetch_bulk_data(access_token: str, spreadsheet_id: str) -> Optional[Dict[str, dict]]:
    """
    Transform every tab of the spreadsheet. Returns None when it has no tabs;
    tabs that are empty or fail to transform are left out.
    """
    with SheetsClient(access_token) as client:
        tabs = client.get_tab_titles(spreadsheet_id)
        if not tabs:
            return None
        values = client.batch_get_values(spreadsheet_id, tabs)

    combined = {}
    for tab in tabs:
        rows = values.get(tab)
        if not rows:
            continue
        try:
            combined[tab] = transform_sheet_data(rows)
        except ValueError as e:
            logger.warning(f"Skipping tab '{tab}' of spreadsheet {spreadsheet_id}: {e}")
    return combined


def save_bulk(db: Session, user_id: int, tenant_id: str, spreadsheet_id: str, sheet_name: str, data: Dict[str, dict]) -> SavedSheet:
    db_sheet = SavedSheet(
        tenant_id=tenant_id,
        user_id=user_id,
        sheet_name=sheet_name,
        spreadsheet_id=spreadsheet_id,
        tab_name=ALL_TABS,
        data_json=data,
        sheet_metadata={
            "tabCount": len(data),
            "savedAt": datetime.now(timezone.utc).isoformat(),
            "isBulkSave": True,
        },
    )
    db.add(db_sheet)
    db.commit()
    db.refresh(db_sheet)
    logger.info(f"Saved {len(data)} tabs of spreadsheet {spreadsheet_id} as '{sheet_name}' for user {user_id}")
    return db_sheet


def get_saved_sheets(db: Session, user_id: int, tenant_id: str):
    return db.query(SavedSheet).filter(
        SavedSheet.user_id == user_id,
        SavedSheet.tenant_id == tenant_id
    ).order_by(SavedSheet.created_at.desc(), SavedSheet.id.desc()).all()


def get_saved_sheet(db: Session, sheet_id: int, user_id: int, tenant_id: str) -> Optional[SavedSheet]:
    return db.query(SavedSheet).filter(
        SavedSheet.id == sheet_id,
        SavedSheet.user_id == user_id,
        SavedSheet.tenant_id == tenant_id
    ).first()


def delete_saved_sheet(db: Session, sheet_id: int, user_id: int, tenant_id: str) -> bool:
    db_sheet = get_saved_sheet(db, sheet_id, user_id, tenant_id)
    if not db_sheet:
        return False
    db.delete(db_sheet)
    db.commit()
    return True
