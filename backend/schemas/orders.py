from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from decimal import Decimal
from datetime import datetime
from schemas.bills import check_payment_mode
from schemas.study_materials import StudyMaterial
from schemas.courses import CourseEnrollment

ORDER_PAYMENT_STATUSES = ["Pending", "Paid", "Failed", "Refunded"]
DELIVERY_STATUSES = ["Pending", "Shipped", "Delivered", "Cancelled"]

class CheckoutItem(BaseModel):
    material_id: int
    quantity: int = Field(1, ge=1)

class CheckoutRequest(BaseModel):
    items: List[CheckoutItem] = Field(..., min_length=1)
    payment_mode: Optional[str] = None
    shipping_address: Optional[str] = None

    @field_validator('payment_mode')
    @classmethod
    def validate_payment_mode(cls, v):
        return check_payment_mode(v)

class OrderItem(BaseModel):
    id: int
    material_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal

    class Config:
        from_attributes = True

class Order(BaseModel):
    id: int
    order_number: str
    user_id: int
    devotee_id: Optional[int] = None
    total_amount: Decimal
    payment_status: str
    payment_mode: Optional[str] = None
    delivery_status: str
    shipping_address: Optional[str] = None
    is_posted: bool
    created_at: Optional[datetime] = None
    items: List[OrderItem] = []

    class Config:
        from_attributes = True

class CheckoutResult(BaseModel):
    order: Order
    skipped_material_ids: List[int]
    enrolled_course_ids: List[int]

class OrderStatusUpdate(BaseModel):
    payment_status: Optional[str] = None
    delivery_status: Optional[str] = None

    @field_validator('payment_status')
    @classmethod
    def validate_payment_status(cls, v):
        if v is not None and v not in ORDER_PAYMENT_STATUSES:
            raise ValueError(f"payment_status must be one of {ORDER_PAYMENT_STATUSES}")
        return v

    @field_validator('delivery_status')
    @classmethod
    def validate_delivery_status(cls, v):
        if v is not None and v not in DELIVERY_STATUSES:
            raise ValueError(f"delivery_status must be one of {DELIVERY_STATUSES}")
        return v

class MyLearning(BaseModel):
    materials: List[StudyMaterial]
    enrollments: List[CourseEnrollment]
