from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from schemas.temple_events import TempleEvent, TempleEventCreate, TempleEventUpdate, EventAnalytics
from crud import temple_events as crud_events
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_user_identifier

router = APIRouter(prefix="/events", tags=["Events"])

EVENT_NOT_FOUND = "Event not found"

@router.post("/", response_model=TempleEvent, status_code=status.HTTP_201_CREATED)
def create_event(
    event: TempleEventCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """Create an event. The slug is derived from the name when not given."""
    try:
        return crud_events.create_event(db, event, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/", response_model=List[TempleEvent])
def read_events(
    status: Optional[str] = None,
    is_published: Optional[bool] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_events.get_events(db, tenant_id, status, is_published)

@router.get("/{event_id}", response_model=TempleEvent)
def read_event(
    event_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_event = crud_events.get_event(db, event_id, tenant_id)
    if db_event is None:
        raise HTTPException(status_code=404, detail=EVENT_NOT_FOUND)
    return db_event

@router.get("/{event_id}/analytics", response_model=EventAnalytics)
def read_event_analytics(
    event_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """Scan and registration counts plus the URL to print as a QR code."""
    db_event = crud_events.get_event(db, event_id, tenant_id)
    if db_event is None:
        raise HTTPException(status_code=404, detail=EVENT_NOT_FOUND)
    return crud_events.get_event_analytics(db, db_event)

@router.patch("/{event_id}", response_model=TempleEvent)
def update_event(
    event_id: int,
    event: TempleEventUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        db_event = crud_events.update_event(db, event_id, event, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if db_event is None:
        raise HTTPException(status_code=404, detail=EVENT_NOT_FOUND)
    return db_event

@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        deleted = crud_events.delete_event(db, event_id, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail=EVENT_NOT_FOUND)
    return None
