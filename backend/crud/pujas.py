from datetime import date
from typing import Optional
from sqlalchemy.orm import Session, joinedload
from models.masters import MasterPuja
from models.pujas import PujaBooking
from models.audit_mixin import now_ist
from schemas.masters import PujaCreate, PujaUpdate
from schemas.pujas import PujaBookingCreate, PujaBookingUpdate
from crud import devotees as crud_devotees
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
from utils.formatting import to_money
import logging

logger = logging.getLogger(__name__)

REFUNDED = "Refunded"

def booking_payment_status(amount, amount_paid, current: str = None) -> str:
    if current == REFUNDED:
        return REFUNDED
    amount_paid = to_money(amount_paid)
    if amount_paid <= 0:
        return "Pending"
    if amount_paid >= to_money(amount):
        return "Paid"
    return "Partial"

# --- Master pujas ---

def get_puja(db: Session, puja_id: int, tenant_id: str) -> Optional[MasterPuja]:
    return db.query(MasterPuja).filter(MasterPuja.id == puja_id, MasterPuja.tenant_id == tenant_id).first()

def get_pujas(db: Session, tenant_id: str, include_inactive: bool = False):
    query = db.query(MasterPuja).filter(MasterPuja.tenant_id == tenant_id)
    if not include_inactive:
        query = query.filter(MasterPuja.is_active == True)
    return query.order_by(MasterPuja.name).all()

def create_puja(db: Session, puja: PujaCreate, tenant_id: str, user_id: str = None) -> MasterPuja:
    if db.query(MasterPuja).filter(MasterPuja.tenant_id == tenant_id, MasterPuja.name == puja.name).first():
        raise ValueError(f"Puja '{puja.name}' already exists")
    db_puja = MasterPuja(**puja.model_dump(), tenant_id=tenant_id, created_by=user_id)
    db.add(db_puja)
    db.commit()
    db.refresh(db_puja)
    return db_puja

def update_puja(db: Session, puja_id: int, puja: PujaUpdate, tenant_id: str, user_id: str):
    db_puja = get_puja(db, puja_id, tenant_id)
    if not db_puja:
        return None
    old_values = sqlalchemy_to_dict(db_puja)
    for key, value in puja.model_dump(exclude_unset=True).items():
        setattr(db_puja, key, value)
    db_puja.updated_by = user_id
    log_change(db, tenant_id, 'master_pujas', db_puja, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_puja)
    return db_puja

# --- Bookings ---

def get_booking(db: Session, booking_id: int, tenant_id: str) -> Optional[PujaBooking]:
    return db.query(PujaBooking).options(joinedload(PujaBooking.devotee), joinedload(PujaBooking.puja)).filter(
        PujaBooking.id == booking_id,
        PujaBooking.tenant_id == tenant_id
    ).first()

def get_bookings(db: Session, tenant_id: str, puja_date: date = None, start_date: date = None, end_date: date = None,
                 devotee_id: int = None, status: str = None, skip: int = 0, limit: int = 100):
    query = db.query(PujaBooking).options(joinedload(PujaBooking.devotee), joinedload(PujaBooking.puja)).filter(
        PujaBooking.tenant_id == tenant_id
    )
    if puja_date:
        query = query.filter(PujaBooking.puja_date == puja_date)
    if start_date:
        query = query.filter(PujaBooking.puja_date >= start_date)
    if end_date:
        query = query.filter(PujaBooking.puja_date <= end_date)
    if devotee_id:
        query = query.filter(PujaBooking.devotee_id == devotee_id)
    if status:
        query = query.filter(PujaBooking.status == status)
    return query.order_by(PujaBooking.puja_date, PujaBooking.time_slot, PujaBooking.id).offset(skip).limit(limit).all()

def create_booking(db: Session, booking: PujaBookingCreate, tenant_id: str, user_id: str = None) -> PujaBooking:
    if not crud_devotees.get_devotee(db, booking.devotee_id, tenant_id):
        raise ValueError(f"Devotee {booking.devotee_id} not found")
    puja = get_puja(db, booking.puja_id, tenant_id)
    if not puja or not puja.is_active:
        raise ValueError(f"Puja {booking.puja_id} not found")
    if booking.puja_date < booking.booking_date:
        raise ValueError("Puja date cannot be before the booking date")

    amount = to_money(booking.amount if booking.amount is not None else puja.base_amount)
    amount_paid = to_money(booking.amount_paid)
    if amount_paid > amount:
        raise ValueError(f"Amount paid ({amount_paid}) exceeds the booking amount ({amount})")

    db_booking = PujaBooking(
        **booking.model_dump(exclude={'amount', 'amount_paid'}),
        amount=amount,
        amount_paid=amount_paid,
        payment_status=booking_payment_status(amount, amount_paid),
        tenant_id=tenant_id,
        created_by=user_id,
    )
    db.add(db_booking)
    db.commit()
    logger.info(f"Puja booking for '{puja.name}' on {booking.puja_date} created by {user_id}")
    return get_booking(db, db_booking.id, tenant_id)

def update_booking(db: Session, booking_id: int, booking_update: PujaBookingUpdate, tenant_id: str, user_id: str):
    db_booking = get_booking(db, booking_id, tenant_id)
    if not db_booking:
        return None
    old_values = sqlalchemy_to_dict(db_booking)
    update_data = booking_update.model_dump(exclude_unset=True, exclude_none=True)
    refunded = update_data.pop('refunded', None)
    amount = to_money(update_data.get('amount', db_booking.amount))
    amount_paid = to_money(update_data.get('amount_paid', db_booking.amount_paid))
    if amount_paid > amount:
        raise ValueError(f"Amount paid ({amount_paid}) exceeds the booking amount ({amount})")

    for key, value in update_data.items():
        setattr(db_booking, key, value)
    if refunded:
        db_booking.payment_status = REFUNDED
    else:
        db_booking.payment_status = booking_payment_status(
            db_booking.amount, db_booking.amount_paid, None if refunded is False else db_booking.payment_status
        )
    db_booking.updated_by = user_id
    log_change(db, tenant_id, 'puja_bookings', db_booking, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_booking)
    return db_booking

def delete_booking(db: Session, booking_id: int, tenant_id: str, user_id: str) -> bool:
    db_booking = get_booking(db, booking_id, tenant_id)
    if not db_booking:
        return False
    old_values = sqlalchemy_to_dict(db_booking)
    db_booking.deleted_at = now_ist()
    db_booking.deleted_by = user_id
    log_change(db, tenant_id, 'puja_bookings', db_booking, user_id, 'DELETE', old_values)
    db.commit()
    return True
