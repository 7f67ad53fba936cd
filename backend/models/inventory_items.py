from sqlalchemy import Column, Integer, String, Text, Numeric, Date, Boolean, UniqueConstraint
from database import Base
from models.audit_mixin import TimestampMixin

class InventoryItem(Base, TimestampMixin):
    __tablename__ = "inventory_items"
    __table_args__ = (UniqueConstraint('name', 'tenant_id', name='_inventory_items_name_tenant_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=True)  # e.g. "Puja Samagri", "Prasadam", "Books"
    unit = Column(String, nullable=False, default="PCS")
    current_stock = Column(Numeric(12, 3), default=0, nullable=False)
    min_stock_level = Column(Numeric(12, 3), default=0, nullable=False)
    unit_cost = Column(Numeric(12, 2), default=0, nullable=False)
    is_perishable = Column(Boolean, default=False, nullable=False)
    expiry_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)

    @property
    def is_low_stock(self):
        return self.current_stock is not None and self.current_stock <= self.min_stock_level
