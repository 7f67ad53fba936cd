from sqlalchemy.orm import Session
from models.masters import MasterNakshatra, MasterRashi, MasterGotra, MasterDonationCategory
import logging

logger = logging.getLogger(__name__)

# URL segment -> model for the simple name-only lookup tables
NAME_MASTERS = {
    "nakshatras": MasterNakshatra,
    "rashis": MasterRashi,
    "gotras": MasterGotra,
}

def get_master_entries(db: Session, model, tenant_id: str, include_inactive: bool = False):
    query = db.query(model).filter(model.tenant_id == tenant_id)
    if not include_inactive:
        query = query.filter(model.is_active == True)
    return query.order_by(model.name).all()

def create_master_entry(db: Session, model, data: dict, tenant_id: str, user_id: str = None):
    name = data['name'].strip()
    existing = db.query(model).filter(model.tenant_id == tenant_id, model.name == name).first()
    if existing:
        raise ValueError(f"'{name}' already exists")
    db_entry = model(**{**data, 'name': name}, tenant_id=tenant_id, created_by=user_id)
    db.add(db_entry)
    db.commit()
    db.refresh(db_entry)
    logger.info(f"{model.__tablename__} entry '{name}' created by {user_id} for tenant {tenant_id}")
    return db_entry

def get_donation_category(db: Session, category_id: int, tenant_id: str):
    return db.query(MasterDonationCategory).filter(
        MasterDonationCategory.id == category_id,
        MasterDonationCategory.tenant_id == tenant_id
    ).first()
