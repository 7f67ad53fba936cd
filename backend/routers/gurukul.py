from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.orders import CheckoutRequest, CheckoutResult, Order, OrderStatusUpdate, MyLearning
from schemas.courses import CourseEnrollment, LessonProgress, LessonProgressUpsert, ModuleCompletionRequest
from crud import orders as crud_orders
from crud import learning as crud_learning
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_current_user, get_user_identifier, get_user_id

router = APIRouter(prefix="/gurukul", tags=["Gurukul"])
logger = logging.getLogger(__name__)

NOT_ENROLLED = "You are not enrolled in this course"

@router.post("/checkout", response_model=CheckoutResult, status_code=status.HTTP_201_CREATED)
def checkout(
    request: CheckoutRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    try:
        return crud_orders.checkout(db, request, tenant_id, get_user_id(user), get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/my-orders", response_model=List[Order])
def read_my_orders(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    return crud_orders.get_orders(db, tenant_id, user_id=get_user_id(user))

@router.get("/my-learning", response_model=MyLearning)
def read_my_learning(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    return crud_learning.get_my_learning(db, get_user_id(user), tenant_id)

@router.put("/courses/{course_id}/lessons/{lesson_id}/progress", response_model=LessonProgress)
def upsert_lesson_progress(
    course_id: int,
    lesson_id: int,
    progress: LessonProgressUpsert,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    enrollment = crud_learning.get_enrollment(db, get_user_id(user), course_id, tenant_id)
    if not enrollment:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_ENROLLED)
    try:
        return crud_learning.upsert_lesson_progress(db, enrollment, lesson_id, progress)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.post("/courses/{course_id}/modules/{module_id}/complete", response_model=CourseEnrollment)
def complete_module(
    course_id: int,
    module_id: int,
    request: ModuleCompletionRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    enrollment = crud_learning.get_enrollment(db, get_user_id(user), course_id, tenant_id)
    if not enrollment:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_ENROLLED)
    try:
        return crud_learning.complete_module(db, enrollment, module_id, request.last_lesson_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

# --- Admin ---

@router.get("/orders", response_model=List[Order])
def read_orders(
    payment_status: Optional[str] = None,
    delivery_status: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_orders.get_orders(db, tenant_id, None, payment_status, delivery_status, skip, limit)

@router.patch("/orders/{order_id}/status", response_model=Order)
def update_order_status(
    order_id: int,
    status_update: OrderStatusUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        db_order = crud_orders.update_order_status(db, order_id, status_update, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not db_order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return db_order
