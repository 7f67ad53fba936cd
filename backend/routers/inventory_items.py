from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.inventory_items import InventoryItem, InventoryItemCreate, InventoryItemUpdate, StockAdjustment
from utils.auth_utils import require_group, get_user_identifier
from crud import inventory_items as crud_inventory_items
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/inventory-items", tags=["Inventory Items"])
logger = logging.getLogger(__name__)

@router.post("/", response_model=InventoryItem, status_code=status.HTTP_201_CREATED)
def create_inventory_item(
    item: InventoryItemCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin"])),
    tenant_id: str = Depends(get_tenant_id)
):
    """Create a new inventory item."""
    try:
        new_item = crud_inventory_items.create_inventory_item(db, item, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info(f"Inventory item '{new_item.name}' created by user {get_user_identifier(user)} for tenant {tenant_id}")
    return new_item

@router.get("/", response_model=List[InventoryItem])
def read_inventory_items(
    skip: int = 0,
    limit: int = 100,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin"])),
    tenant_id: str = Depends(get_tenant_id)
):
    """Retrieve a list of inventory items, with optional filtering by category."""
    return crud_inventory_items.get_inventory_items(db, tenant_id, category, skip, limit)

@router.get("/low-stock", response_model=List[InventoryItem])
def read_low_stock_items(
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin"])),
    tenant_id: str = Depends(get_tenant_id)
):
    """Items at or below their minimum stock level."""
    return crud_inventory_items.get_low_stock_items(db, tenant_id)

@router.get("/{item_id}", response_model=InventoryItem)
def read_inventory_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin"])),
    tenant_id: str = Depends(get_tenant_id)
):
    """Retrieve a single inventory item by ID."""
    db_item = crud_inventory_items.get_inventory_item(db, item_id, tenant_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return db_item

@router.patch("/{item_id}", response_model=InventoryItem)
def update_inventory_item(
    item_id: int,
    item: InventoryItemUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin"])),
    tenant_id: str = Depends(get_tenant_id)
):
    try:
        db_item = crud_inventory_items.update_inventory_item(db, item_id, item, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return db_item

@router.post("/{item_id}/adjust-stock", response_model=InventoryItem)
def adjust_stock(
    item_id: int,
    adjustment: StockAdjustment,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin"])),
    tenant_id: str = Depends(get_tenant_id)
):
    try:
        db_item = crud_inventory_items.adjust_stock(db, item_id, adjustment, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return db_item

@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inventory_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin"])),
    tenant_id: str = Depends(get_tenant_id)
):
    if not crud_inventory_items.delete_inventory_item(db, item_id, tenant_id, get_user_identifier(user)):
        raise HTTPException(status_code=404, detail="Inventory item not found")
    logger.info(f"Inventory item {item_id} deleted by user {get_user_identifier(user)} for tenant {tenant_id}")
    return None
