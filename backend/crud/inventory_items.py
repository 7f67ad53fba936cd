from typing import Optional
from sqlalchemy.orm import Session
from models.inventory_items import InventoryItem
from schemas.inventory_items import InventoryItemCreate, InventoryItemUpdate, StockAdjustment
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
import logging

logger = logging.getLogger(__name__)

def get_inventory_item(db: Session, item_id: int, tenant_id: str) -> Optional[InventoryItem]:
    return db.query(InventoryItem).filter(InventoryItem.id == item_id, InventoryItem.tenant_id == tenant_id).first()

def get_inventory_items(db: Session, tenant_id: str, category: str = None, skip: int = 0, limit: int = 100):
    query = db.query(InventoryItem).filter(InventoryItem.tenant_id == tenant_id)
    if category:
        query = query.filter(InventoryItem.category == category)
    return query.order_by(InventoryItem.name).offset(skip).limit(limit).all()

def get_low_stock_items(db: Session, tenant_id: str):
    return db.query(InventoryItem).filter(
        InventoryItem.tenant_id == tenant_id,
        InventoryItem.current_stock <= InventoryItem.min_stock_level
    ).order_by(InventoryItem.name).all()

def _check_name_free(db: Session, name: str, tenant_id: str, item_id: int = None):
    query = db.query(InventoryItem).filter(InventoryItem.name == name, InventoryItem.tenant_id == tenant_id)
    if item_id:
        query = query.filter(InventoryItem.id != item_id)
    if query.first():
        raise ValueError("Inventory item with this name already exists")

def create_inventory_item(db: Session, item: InventoryItemCreate, tenant_id: str, user_id: str = None):
    _check_name_free(db, item.name, tenant_id)
    db_item = InventoryItem(**item.model_dump(), tenant_id=tenant_id, created_by=user_id, updated_by=user_id)
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item

def update_inventory_item(db: Session, item_id: int, item: InventoryItemUpdate, tenant_id: str, user_id: str):
    db_item = get_inventory_item(db, item_id, tenant_id)
    if not db_item:
        return None
    update_data = item.model_dump(exclude_unset=True)
    if update_data.get('name'):
        _check_name_free(db, update_data['name'], tenant_id, item_id)
    old_values = sqlalchemy_to_dict(db_item)
    for key, value in update_data.items():
        setattr(db_item, key, value)
    db_item.updated_by = user_id
    log_change(db, tenant_id, 'inventory_items', db_item, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_item)
    return db_item

def adjust_stock(db: Session, item_id: int, adjustment: StockAdjustment, tenant_id: str, user_id: str):
    """Receive or issue stock; issuing more than is on hand is rejected."""
    db_item = get_inventory_item(db, item_id, tenant_id)
    if not db_item:
        return None
    old_values = sqlalchemy_to_dict(db_item)
    delta = adjustment.quantity if adjustment.direction == "in" else -adjustment.quantity
    new_stock = db_item.current_stock + delta
    if new_stock < 0:
        raise ValueError(f"Insufficient stock for '{db_item.name}': {db_item.current_stock} {db_item.unit} on hand")
    db_item.current_stock = new_stock
    db_item.updated_by = user_id
    log_change(db, tenant_id, 'inventory_items', db_item, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_item)
    logger.info(f"Stock {adjustment.direction} {adjustment.quantity} for '{db_item.name}' by {user_id} ({adjustment.reason or 'no reason'}); now {db_item.current_stock}")
    return db_item

def delete_inventory_item(db: Session, item_id: int, tenant_id: str, user_id: str) -> bool:
    db_item = get_inventory_item(db, item_id, tenant_id)
    if not db_item:
        return False
    log_change(db, tenant_id, 'inventory_items', db_item, user_id, 'DELETE', sqlalchemy_to_dict(db_item))
    db.delete(db_item)
    db.commit()
    return True
