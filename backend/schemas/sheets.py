from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime

class GoogleTokenStore(BaseModel):
    provider_token: str = Field(..., min_length=1)
    provider_refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None

class SaveBulkRequest(BaseModel):
    spreadsheetId: Optional[str] = None
    sheetName: Optional[str] = None

class BulkSheetData(BaseModel):
    success: bool
    data: Dict[str, Dict[str, Any]]

class SavedSheet(BaseModel):
    id: int
    user_id: int
    sheet_name: str
    spreadsheet_id: str
    tab_name: str
    data_json: Dict[str, Any]
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="sheet_metadata")
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class SavedSheetSummary(BaseModel):
    id: int
    sheet_name: str
    spreadsheet_id: str
    tab_name: str
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="sheet_metadata")
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class SaveBulkResult(BaseModel):
    success: bool
    savedSheet: SavedSheet
