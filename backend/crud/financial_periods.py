from datetime import date
from typing import Optional
from sqlalchemy.orm import Session
from models.financial_periods import FinancialPeriod
from schemas.financial_periods import FinancialPeriodCreate, FinancialPeriodUpdate
import logging

logger = logging.getLogger(__name__)

OPEN = "Open"
CLOSED = "Closed"

def financial_year_bounds(on_date: date):
    """Indian financial year (1 April - 31 March) containing on_date."""
    start_year = on_date.year if on_date.month >= 4 else on_date.year - 1
    return date(start_year, 4, 1), date(start_year + 1, 3, 31)

def financial_year_label(on_date: date) -> str:
    start, end = financial_year_bounds(on_date)
    return f"{start.year}-{str(end.year)[-2:]}"

def get_period(db: Session, period_id: int, tenant_id: str) -> Optional[FinancialPeriod]:
    return db.query(FinancialPeriod).filter(
        FinancialPeriod.id == period_id,
        FinancialPeriod.tenant_id == tenant_id
    ).first()

def get_periods(db: Session, tenant_id: str, status: str = None):
    query = db.query(FinancialPeriod).filter(FinancialPeriod.tenant_id == tenant_id)
    if status:
        query = query.filter(FinancialPeriod.status == status)
    return query.order_by(FinancialPeriod.start_date.desc()).all()

def get_open_period(db: Session, tenant_id: str, on_date: date) -> Optional[FinancialPeriod]:
    return db.query(FinancialPeriod).filter(
        FinancialPeriod.tenant_id == tenant_id,
        FinancialPeriod.status == OPEN,
        FinancialPeriod.start_date <= on_date,
        FinancialPeriod.end_date >= on_date
    ).order_by(FinancialPeriod.start_date.desc()).first()

def _check_overlap(db: Session, tenant_id: str, start_date: date, end_date: date, exclude_id: int = None):
    query = db.query(FinancialPeriod).filter(
        FinancialPeriod.tenant_id == tenant_id,
        FinancialPeriod.status == OPEN,
        FinancialPeriod.start_date <= end_date,
        FinancialPeriod.end_date >= start_date
    )
    if exclude_id is not None:
        query = query.filter(FinancialPeriod.id != exclude_id)
    clash = query.first()
    if clash:
        raise ValueError(f"Period overlaps open period '{clash.period_name}' ({clash.start_date} to {clash.end_date})")

def create_period(db: Session, period: FinancialPeriodCreate, tenant_id: str, user_id: str = None) -> FinancialPeriod:
    _check_overlap(db, tenant_id, period.start_date, period.end_date)
    if db.query(FinancialPeriod).filter(FinancialPeriod.tenant_id == tenant_id, FinancialPeriod.period_name == period.period_name).first():
        raise ValueError(f"A period named '{period.period_name}' already exists")

    db_period = FinancialPeriod(**period.model_dump(), status=OPEN, tenant_id=tenant_id, created_by=user_id)
    db.add(db_period)
    db.commit()
    db.refresh(db_period)
    logger.info(f"Opened financial period '{db_period.period_name}' for tenant {tenant_id}")
    return db_period

def update_period(db: Session, period_id: int, period_update: FinancialPeriodUpdate, tenant_id: str, user_id: str):
    db_period = get_period(db, period_id, tenant_id)
    if not db_period:
        return None
    update_data = period_update.model_dump(exclude_unset=True)
    start_date = update_data.get('start_date', db_period.start_date)
    end_date = update_data.get('end_date', db_period.end_date)
    if start_date > end_date:
        raise ValueError("start_date must be on or before end_date")
    if db_period.status == OPEN:
        _check_overlap(db, tenant_id, start_date, end_date, exclude_id=period_id)

    for key, value in update_data.items():
        setattr(db_period, key, value)
    db_period.updated_by = user_id
    db.commit()
    db.refresh(db_period)
    return db_period

def set_period_status(db: Session, period_id: int, status: str, tenant_id: str, user_id: str):
    db_period = get_period(db, period_id, tenant_id)
    if not db_period:
        return None
    if status == OPEN and db_period.status != OPEN:
        _check_overlap(db, tenant_id, db_period.start_date, db_period.end_date, exclude_id=period_id)
    db_period.status = status
    db_period.updated_by = user_id
    db.commit()
    db.refresh(db_period)
    logger.info(f"Financial period '{db_period.period_name}' set to {status} by {user_id} for tenant {tenant_id}")
    return db_period

def ensure_current_year_period(db: Session, tenant_id: str, user_id: str = None, today: date = None) -> FinancialPeriod:
    """Open the current financial year's period unless one already covers today."""
    today = today or date.today()
    existing = get_open_period(db, tenant_id, today)
    if existing:
        return existing
    start, end = financial_year_bounds(today)
    return create_period(
        db,
        FinancialPeriodCreate(period_name=f"FY {financial_year_label(today)}", start_date=start, end_date=end),
        tenant_id,
        user_id,
    )
