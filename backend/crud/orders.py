import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from models.study_materials import StudyMaterialOrder, OrderItem
from models.courses import CourseEnrollment
from models.users import UserProfile
from schemas.orders import CheckoutRequest, OrderStatusUpdate
from schemas.general_ledger import LedgerLine
from crud import study_materials as crud_materials
from crud import general_ledger as crud_ledger
from crud import financial_settings as crud_settings
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
from utils.formatting import to_money
from utils.document_numbers import generate_document_number, ORDER_PREFIX

logger = logging.getLogger(__name__)

ORDER_REFERENCE = "Gurukul Order"
PAID = "Paid"
PENDING = "Pending"


def get_order(db: Session, order_id: int, tenant_id: str) -> Optional[StudyMaterialOrder]:
    return db.query(StudyMaterialOrder).options(selectinload(StudyMaterialOrder.items)).filter(
        StudyMaterialOrder.id == order_id,
        StudyMaterialOrder.tenant_id == tenant_id
    ).first()


def get_orders(db: Session, tenant_id: str, user_id: int = None, payment_status: str = None,
               delivery_status: str = None, skip: int = 0, limit: int = 100):
    query = db.query(StudyMaterialOrder).options(selectinload(StudyMaterialOrder.items)).filter(
        StudyMaterialOrder.tenant_id == tenant_id
    )
    if user_id:
        query = query.filter(StudyMaterialOrder.user_id == user_id)
    if payment_status:
        query = query.filter(StudyMaterialOrder.payment_status == payment_status)
    if delivery_status:
        query = query.filter(StudyMaterialOrder.delivery_status == delivery_status)
    return query.order_by(StudyMaterialOrder.created_at.desc(), StudyMaterialOrder.id.desc()).offset(skip).limit(limit).all()


def checkout(db: Session, request: CheckoutRequest, tenant_id: str, user_id: int, user_email: str = None) -> dict:
    """
    Place an order for the items the user does not own yet and enroll them in
    any courses among those items.
    """
    owned = crud_materials.owned_material_ids(db, user_id, tenant_id)

    to_buy, skipped = [], []
    for item in request.items:
        material = crud_materials.get_material(db, item.material_id, tenant_id)
        if not material or not material.is_published:
            raise ValueError(f"Study material {item.material_id} is not available")
        if material.id in owned or any(m.id == material.id for m, _ in to_buy):
            skipped.append(material.id)
            continue
        to_buy.append((material, item.quantity))

    if not to_buy:
        raise ValueError("You already own all items in this order")

    total = sum(
        (Decimal("0") if material.is_free else to_money(material.price) * quantity for material, quantity in to_buy),
        Decimal("0")
    )
    total = to_money(total)
    if total > 0 and not request.payment_mode:
        raise ValueError("Please select a payment mode")

    profile = db.query(UserProfile).filter(UserProfile.id == user_id).first()
    db_order = StudyMaterialOrder(
        order_number=generate_document_number(db, StudyMaterialOrder.order_number, tenant_id, ORDER_PREFIX),
        user_id=user_id,
        devotee_id=profile.devotee_id if profile else None,
        total_amount=total,
        payment_status=PAID if total == 0 else PENDING,
        payment_mode=request.payment_mode if total > 0 else None,
        delivery_status=PENDING,
        shipping_address=request.shipping_address,
        is_posted=False,
        tenant_id=tenant_id,
        created_by=user_email,
    )
    for material, quantity in to_buy:
        unit_price = Decimal("0") if material.is_free else to_money(material.price)
        db_order.items.append(OrderItem(
            material_id=material.id,
            quantity=quantity,
            unit_price=unit_price,
            line_total=unit_price * quantity,
        ))
    db.add(db_order)
    db.flush()

    enrolled = []
    for material, _ in to_buy:
        if material.type != crud_materials.COURSE:
            continue
        existing = db.query(CourseEnrollment).filter(
            CourseEnrollment.user_id == user_id,
            CourseEnrollment.course_id == material.id
        ).first()
        if not existing:
            db.add(CourseEnrollment(
                tenant_id=tenant_id,
                user_id=user_id,
                course_id=material.id,
                order_id=db_order.id,
                progress_percentage=0,
                created_by=user_email,
            ))
            enrolled.append(material.id)

    db.commit()
    db.refresh(db_order)
    logger.info(f"Order {db_order.order_number} for {total} placed by user {user_id}; skipped {skipped}, enrolled {enrolled}")
    return {"order": db_order, "skipped_material_ids": skipped, "enrolled_course_ids": enrolled}


def update_order_status(db: Session, order_id: int, status_update: OrderStatusUpdate, tenant_id: str, user_id: str):
    """Marking a priced order Paid posts Dr Cash / Cr Gurukul Sales once."""
    db_order = get_order(db, order_id, tenant_id)
    if not db_order:
        return None
    old_values = sqlalchemy_to_dict(db_order)
    update_data = status_update.model_dump(exclude_unset=True, exclude_none=True)

    becomes_paid = update_data.get('payment_status') == PAID and db_order.payment_status != PAID
    if becomes_paid and not db_order.is_posted and to_money(db_order.total_amount) > 0:
        cash = crud_settings.get_default_account(db, tenant_id, 'default_cash_account_id')
        sales = crud_settings.get_default_account(db, tenant_id, 'default_gurukul_sales_account_id')
        description = f"Gurukul order {db_order.order_number}"
        lines = [
            LedgerLine(account_id=cash.id, debit_amount=db_order.total_amount, description=description),
            LedgerLine(account_id=sales.id, credit_amount=db_order.total_amount, description=description),
        ]
        try:
            crud_ledger.post_transaction(db, tenant_id, date.today(), lines, ORDER_REFERENCE, db_order.id, description, user_id)
        except ValueError:
            db.rollback()
            raise
        db_order.is_posted = True

    for key, value in update_data.items():
        setattr(db_order, key, value)
    db_order.updated_by = user_id
    log_change(db, tenant_id, 'study_material_orders', db_order, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_order)
    logger.info(f"Order {db_order.order_number} now {db_order.payment_status}/{db_order.delivery_status} (by {user_id})")
    return db_order
