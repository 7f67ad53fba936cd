import logging
import os
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.temple_events import TempleEvent, EventRegistrationAnalytics
from models.devotees import Devotee
from models.audit_mixin import now_ist
from schemas.temple_events import TempleEventCreate, TempleEventUpdate, EventRegistrationForm
from schemas.devotees import DevoteeCreate
from crud import devotees as crud_devotees
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
from utils.document_numbers import generate_slug

logger = logging.getLogger(__name__)

PUBLIC_APP_URL = os.getenv("PUBLIC_APP_URL", "http://localhost:3000").rstrip("/")
RECENT_REGISTRATIONS_LIMIT = 10


def registration_url(event: TempleEvent) -> str:
    return f"{PUBLIC_APP_URL}/events/{event.tenant_id}/{event.slug}"


def get_event(db: Session, event_id: int, tenant_id: str) -> Optional[TempleEvent]:
    return db.query(TempleEvent).filter(TempleEvent.id == event_id, TempleEvent.tenant_id == tenant_id).first()


def get_event_any_tenant(db: Session, event_id: int) -> Optional[TempleEvent]:
    """Public endpoints only know the event id; the tenant comes from the row."""
    return db.query(TempleEvent).filter(TempleEvent.id == event_id).first()


def get_events(db: Session, tenant_id: str, status: str = None, is_published: bool = None):
    query = db.query(TempleEvent).filter(TempleEvent.tenant_id == tenant_id)
    if status:
        query = query.filter(TempleEvent.status == status)
    if is_published is not None:
        query = query.filter(TempleEvent.is_published == is_published)
    return query.order_by(TempleEvent.start_date.desc()).all()


def get_published_event_by_slug(db: Session, slug: str, tenant_id: str) -> Optional[TempleEvent]:
    return db.query(TempleEvent).filter(
        TempleEvent.tenant_id == tenant_id,
        TempleEvent.slug == slug,
        TempleEvent.is_published == True
    ).first()


def _check_slug_free(db: Session, slug: str, tenant_id: str, event_id: int = None):
    query = db.query(TempleEvent).filter(TempleEvent.tenant_id == tenant_id, TempleEvent.slug == slug)
    if event_id:
        query = query.filter(TempleEvent.id != event_id)
    if query.first():
        raise ValueError(f"An event with slug '{slug}' already exists")


def _check_dates(start_date, end_date):
    if end_date and start_date and end_date < start_date:
        raise ValueError("End date cannot be before the start date")


def create_event(db: Session, event: TempleEventCreate, tenant_id: str, user_id: str = None) -> TempleEvent:
    _check_dates(event.start_date, event.end_date)
    slug = event.slug or generate_slug(event.name)
    if not slug:
        raise ValueError("Could not derive a slug from the event name; please provide one")
    _check_slug_free(db, slug, tenant_id)

    db_event = TempleEvent(**event.model_dump(exclude={'slug'}), slug=slug, tenant_id=tenant_id, created_by=user_id)
    db.add(db_event)
    db.commit()
    db.refresh(db_event)
    logger.info(f"Event '{db_event.name}' ({db_event.slug}) created by {user_id} for tenant {tenant_id}")
    return db_event


def update_event(db: Session, event_id: int, event: TempleEventUpdate, tenant_id: str, user_id: str):
    db_event = get_event(db, event_id, tenant_id)
    if not db_event:
        return None
    update_data = event.model_dump(exclude_unset=True)
    _check_dates(update_data.get('start_date', db_event.start_date), update_data.get('end_date', db_event.end_date))
    if update_data.get('slug'):
        _check_slug_free(db, update_data['slug'], tenant_id, event_id)

    old_values = sqlalchemy_to_dict(db_event)
    for key, value in update_data.items():
        setattr(db_event, key, value)
    db_event.updated_by = user_id
    log_change(db, tenant_id, 'temple_events', db_event, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_event)
    return db_event


def delete_event(db: Session, event_id: int, tenant_id: str, user_id: str) -> bool:
    db_event = get_event(db, event_id, tenant_id)
    if not db_event:
        return False
    if db_event.analytics:
        raise ValueError("Events with registrations cannot be deleted. Unpublish the event instead.")
    log_change(db, tenant_id, 'temple_events', db_event, user_id, 'DELETE', sqlalchemy_to_dict(db_event))
    db.delete(db_event)
    db.commit()
    return True


def track_scan(db: Session, event: TempleEvent, session_id: str, user_agent: str = None, ip_address: str = None):
    scan = EventRegistrationAnalytics(
        tenant_id=event.tenant_id,
        event_id=event.id,
        session_id=session_id,
        user_agent=user_agent,
        ip_address=ip_address,
    )
    db.add(scan)
    db.commit()
    logger.info(f"QR scan recorded for event {event.id} session {session_id}")
    return scan


def _mark_session_submitted(db: Session, event: TempleEvent, session_id: str, devotee_id: int):
    updated = db.query(EventRegistrationAnalytics).filter(
        EventRegistrationAnalytics.event_id == event.id,
        EventRegistrationAnalytics.session_id == session_id,
        EventRegistrationAnalytics.form_submitted_at.is_(None)
    ).update({
        EventRegistrationAnalytics.devotee_id: devotee_id,
        EventRegistrationAnalytics.form_submitted_at: now_ist(),
    }, synchronize_session=False)
    if not updated:
        logger.warning(f"No open scan session '{session_id}' for event {event.id}; analytics not updated")


def register_devotee(db: Session, event: TempleEvent, form: EventRegistrationForm, session_id: str = None) -> Devotee:
    """
    Create a devotee from the public registration form. The scan session, if
    any, is stamped as submitted; failing that step never fails the registration.
    """
    name_parts = form.name.split()
    if not name_parts:
        raise ValueError("Name is required")
    # Already validated as a whole name; a one-letter first name is accepted here
    devotee = DevoteeCreate.model_construct(
        first_name=name_parts[0],
        last_name=" ".join(name_parts[1:]) or None,
        mobile_number=form.phone.strip(),
        email=form.email,
        date_of_birth=form.dob,
        occupation=form.occupation,
        city=form.city,
        state=form.state,
        country="India",
        membership_type="General",
        membership_status="Active",
        event_source=event.slug,
    )
    db_devotee = crud_devotees.build_devotee(db, devotee, event.tenant_id, user_id=f"event:{event.slug}")
    db.commit()
    db.refresh(db_devotee)
    logger.info(f"Devotee {db_devotee.devotee_code} registered through event '{event.slug}'")

    if session_id:
        try:
            _mark_session_submitted(db, event, session_id, db_devotee.id)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(f"Failed to update analytics for event {event.id} session {session_id}")
    return db_devotee


def get_event_analytics(db: Session, event: TempleEvent) -> dict:
    total_scans = db.query(func.count(EventRegistrationAnalytics.id)).filter(
        EventRegistrationAnalytics.event_id == event.id
    ).scalar() or 0
    total_submissions = db.query(func.count(EventRegistrationAnalytics.id)).filter(
        EventRegistrationAnalytics.event_id == event.id,
        EventRegistrationAnalytics.form_submitted_at.isnot(None)
    ).scalar() or 0

    if total_scans:
        conversion_rate = (Decimal(total_submissions) / Decimal(total_scans) * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    else:
        conversion_rate = Decimal("0")

    recent = db.query(Devotee).filter(
        Devotee.tenant_id == event.tenant_id,
        Devotee.event_source == event.slug
    ).order_by(Devotee.created_at.desc(), Devotee.id.desc()).limit(RECENT_REGISTRATIONS_LIMIT).all()

    url = registration_url(event)
    return {
        "event_id": event.id,
        "event_name": event.name,
        "slug": event.slug,
        "total_scans": total_scans,
        "total_submissions": total_submissions,
        "conversion_rate": conversion_rate,
        "registration_url": url,
        "qr_code_data": url,
        "recent_registrations": recent,
    }
