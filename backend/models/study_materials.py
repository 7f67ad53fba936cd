from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin, TimestampMixin

class StudyMaterial(Base, AuditMixin):
    """Anything sold through the Gurukul store. A course is a material of type "Course"."""
    __tablename__ = "study_materials"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(10), nullable=False)  # Book, PDF, Video, Audio, Course
    author = Column(String, nullable=True)
    language = Column(String, nullable=False, default="English")
    price = Column(Numeric(12, 2), default=0, nullable=False)
    is_free = Column(Boolean, default=False, nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)
    is_digital = Column(Boolean, default=True, nullable=False)
    stock_quantity = Column(Integer, default=0, nullable=False)
    file_urls = Column(JSON, default=list)
    cover_image_url = Column(String(500), nullable=True)

    modules = relationship("CourseModule", back_populates="course", order_by="CourseModule.order_index")


class StudyMaterialOrder(Base, TimestampMixin):
    __tablename__ = "study_material_orders"
    __table_args__ = (UniqueConstraint('tenant_id', 'order_number', name='_tenant_order_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    order_number = Column(String(20), nullable=False, index=True)  # ORD-2024-0001
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    devotee_id = Column(Integer, ForeignKey("devotees.id"), nullable=True)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    payment_status = Column(String(20), nullable=False, default="Pending")  # Pending, Paid, Failed, Refunded
    payment_mode = Column(String, nullable=True)
    delivery_status = Column(String(20), nullable=False, default="Pending")  # Pending, Shipped, Delivered, Cancelled
    shipping_address = Column(Text, nullable=True)
    is_posted = Column(Boolean, default=False, nullable=False)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("study_material_orders.id"), nullable=False)
    material_id = Column(Integer, ForeignKey("study_materials.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(12, 2), nullable=False)
    line_total = Column(Numeric(12, 2), nullable=False)

    order = relationship("StudyMaterialOrder", back_populates="items")
    material = relationship("StudyMaterial")
