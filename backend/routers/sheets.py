from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.sheets import GoogleTokenStore, SaveBulkRequest, BulkSheetData, SaveBulkResult, SavedSheet, SavedSheetSummary
from crud import sheets as crud_sheets
from utils.sheets_client import SheetsAPIError
from utils.tenancy import get_tenant_id
from utils.auth_utils import get_current_user, get_user_id

router = APIRouter(tags=["Sheets"])
logger = logging.getLogger(__name__)

def _access_token(db: Session, user_id: int) -> str:
    token = crud_sheets.get_google_token(db, user_id)
    if not token or not token.provider_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Google account not connected")
    return token.provider_token

def _load_tabs(db: Session, user_id: int, spreadsheet_id: str) -> dict:
    access_token = _access_token(db, user_id)
    try:
        data = crud_sheets.fetch_bulk_data(access_token, spreadsheet_id)
    except SheetsAPIError as e:
        logger.error(f"Sheets API error for spreadsheet {spreadsheet_id}: {e}")
        if e.timed_out:
            raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(e))
        if e.status_code in (401, 403, 404):
            raise HTTPException(status_code=e.status_code, detail=str(e))
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    if data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No tabs found in spreadsheet")
    return data

@router.put("/api/google-token", status_code=status.HTTP_204_NO_CONTENT)
def store_google_token(
    token: GoogleTokenStore,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user)
):
    """Record the OAuth access token granted when the user connected Google."""
    crud_sheets.store_google_token(db, get_user_id(user), token)
    return None

@router.get("/api/sheets/data-bulk", response_model=BulkSheetData)
def get_bulk_data(
    spreadsheetId: Optional[str] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user)
):
    if not spreadsheetId:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Spreadsheet ID is required")
    return {"success": True, "data": _load_tabs(db, get_user_id(user), spreadsheetId)}

@router.post("/api/sheets/save-bulk", response_model=SaveBulkResult)
def save_bulk(
    request: SaveBulkRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    if not request.spreadsheetId or not request.sheetName:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")
    user_id = get_user_id(user)
    data = _load_tabs(db, user_id, request.spreadsheetId)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid data found in any tab")
    saved = crud_sheets.save_bulk(db, user_id, tenant_id, request.spreadsheetId, request.sheetName, data)
    return {"success": True, "savedSheet": saved}

@router.get("/saved-sheets", response_model=List[SavedSheetSummary])
def read_saved_sheets(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    return crud_sheets.get_saved_sheets(db, get_user_id(user), tenant_id)

@router.get("/saved-sheets/{sheet_id}", response_model=SavedSheet)
def read_saved_sheet(
    sheet_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    db_sheet = crud_sheets.get_saved_sheet(db, sheet_id, get_user_id(user), tenant_id)
    if not db_sheet:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Saved sheet not found")
    return db_sheet

@router.delete("/saved-sheets/{sheet_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_saved_sheet(
    sheet_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    if not crud_sheets.delete_saved_sheet(db, sheet_id, get_user_id(user), tenant_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Saved sheet not found")
    return None
