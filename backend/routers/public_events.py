from fastapi import APIRouter, Body, Depends, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import Any, Dict
import logging

from database import get_db
from schemas.temple_events import PublicEvent, TrackScanRequest, EventRegistrationForm, EventRegistrationResponse
from crud import temple_events as crud_events

# No authentication: these are opened from the QR code printed for an event.
router = APIRouter(tags=["Public Events"])
logger = logging.getLogger(__name__)

def client_ip(request: Request):
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("x-real-ip")

@router.get("/public/events/{tenant_id}/{slug}", response_model=PublicEvent)
def read_public_event(tenant_id: str, slug: str, db: Session = Depends(get_db)):
    db_event = crud_events.get_published_event_by_slug(db, slug, tenant_id)
    if db_event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return db_event

@router.post("/api/events/{event_id}/track-scan")
def track_scan(event_id: int, scan: TrackScanRequest, request: Request, db: Session = Depends(get_db)):
    if not scan.session_id:
        raise HTTPException(status_code=400, detail="Session ID is required")

    db_event = crud_events.get_event_any_tenant(db, event_id)
    if not db_event or not db_event.is_published:
        raise HTTPException(status_code=404, detail="Event not found or not published")

    crud_events.track_scan(
        db, db_event, scan.session_id,
        user_agent=scan.user_agent or request.headers.get("user-agent"),
        ip_address=client_ip(request),
    )
    return {"success": True, "session_id": scan.session_id}

@router.post("/api/events/{event_id}/register", response_model=EventRegistrationResponse)
def register_for_event(event_id: int, body: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Register a visitor as a devotee. Validation errors come back as 400 with per-field details."""
    form_data = dict(body)
    session_id = form_data.pop("session_id", None)
    try:
        form = EventRegistrationForm.model_validate(form_data)
    except ValidationError as e:
        details = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise HTTPException(status_code=400, detail={"error": "Invalid form data", "details": details})

    db_event = crud_events.get_event_any_tenant(db, event_id)
    if db_event is None:
        logger.warning(f"Registration attempted for missing event {event_id}")
        raise HTTPException(status_code=404, detail="Event not found")
    if not db_event.is_published:
        logger.warning(f"Registration attempted for unpublished event {event_id}")
        raise HTTPException(status_code=403, detail="This event is not currently published")

    try:
        devotee = crud_events.register_devotee(db, db_event, form, session_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"error": "Invalid form data", "details": [{"field": "name", "message": str(e)}]})
    return {"success": True, "message": "Registration successful", "devotee_id": devotee.id}
