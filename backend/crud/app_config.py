from sqlalchemy.orm import Session
from models.app_config import AppConfig
from schemas.app_config import AppConfigCreate, AppConfigUpdate
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIGS = [
    {"name": "temple_name", "value": "Sri Temple Trust"},
    {"name": "temple_address", "value": ""},
    {"name": "temple_phone", "value": ""},
    {"name": "temple_email", "value": ""},
    {"name": "temple_pan", "value": ""},
    {"name": "registration_80g", "value": ""},
    {"name": "receipt_footer", "value": "May the divine blessings be with you always."},
    {"name": "low_stock_alert_enabled", "value": "true"},
]


# Create a new config entry
def create_config(db: Session, config: AppConfigCreate, tenant_id: str, user_id: str):
    existing = get_config(db, tenant_id, config.name)
    if existing:
        raise ValueError(f"Configuration '{config.name}' already exists")
    db_config = AppConfig(name=config.name, value=config.value, tenant_id=tenant_id, created_by=user_id)
    db.add(db_config)
    db.flush()
    log_change(db, tenant_id, 'app_config', db_config, user_id, 'CREATE')
    db.commit()
    db.refresh(db_config)
    return db_config


# Get config by name (or all configs)
def get_config(db: Session, tenant_id: str, name: str = None):
    if name:
        return db.query(AppConfig).filter(AppConfig.name == name, AppConfig.tenant_id == tenant_id).first()
    return db.query(AppConfig).filter(AppConfig.tenant_id == tenant_id).order_by(AppConfig.name).all()


# Update config by name
def update_config_by_name(db: Session, name: str, config: AppConfigUpdate, tenant_id: str, user_id: str):
    db_config = get_config(db, tenant_id, name)
    if not db_config:
        return None

    old_values = sqlalchemy_to_dict(db_config)
    for field, value in config.model_dump(exclude_unset=True).items():
        setattr(db_config, field, value)
    db_config.updated_by = user_id
    log_change(db, tenant_id, 'app_config', db_config, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_config)
    return db_config


def delete_config_by_name(db: Session, name: str, tenant_id: str, user_id: str) -> bool:
    db_config = get_config(db, tenant_id, name)
    if not db_config:
        return False
    log_change(db, tenant_id, 'app_config', db_config, user_id, 'DELETE', sqlalchemy_to_dict(db_config))
    db.delete(db_config)
    db.commit()
    return True


def missing_default_configs(db: Session, tenant_id: str):
    existing = {name for (name,) in db.query(AppConfig.name).filter(AppConfig.tenant_id == tenant_id)}
    return [c for c in DEFAULT_CONFIGS if c["name"] not in existing]


def initialize_default_configs(db: Session, tenant_id: str, user_id: str):
    """Seed DEFAULT_CONFIGS; existing values are never overwritten."""
    created = []
    for config_data in missing_default_configs(db, tenant_id):
        db_config = AppConfig(**config_data, tenant_id=tenant_id, created_by=user_id)
        db.add(db_config)
        created.append(config_data["name"])
    db.commit()
    if created:
        logger.info(f"Initialized default configs for tenant '{tenant_id}' by {user_id}: {created}")
    return created


def get_config_values(db: Session, tenant_id: str) -> dict:
    """Tenant config as a plain dict with the defaults filled in."""
    values = {c["name"]: c["value"] for c in DEFAULT_CONFIGS}
    values.update({c.name: c.value for c in get_config(db, tenant_id)})
    return values


def get_temple_profile(db: Session, tenant_id: str) -> dict:
    """Header details printed on donation receipts."""
    values = get_config_values(db, tenant_id)
    return {
        "name": values["temple_name"],
        "address": values["temple_address"],
        "phone": values["temple_phone"],
        "email": values["temple_email"],
        "pan": values["temple_pan"],
        "registration_80g": values["registration_80g"],
        "footer": values["receipt_footer"],
    }
