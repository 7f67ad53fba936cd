from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from schemas.masters import Puja, PujaCreate, PujaUpdate
from schemas.pujas import PujaBooking, PujaBookingCreate, PujaBookingUpdate
from crud import pujas as crud_pujas
from utils.tenancy import get_tenant_id
from utils.auth_utils import get_current_user, require_group, get_user_identifier

router = APIRouter(prefix="/pujas", tags=["Pujas"])

BOOKING_NOT_FOUND = "Puja booking not found"

@router.get("/", response_model=List[Puja])
def read_pujas(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    return crud_pujas.get_pujas(db, tenant_id, include_inactive)

@router.post("/", response_model=Puja, status_code=status.HTTP_201_CREATED)
def create_puja(
    puja: PujaCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        return crud_pujas.create_puja(db, puja, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.post("/bookings", response_model=PujaBooking, status_code=status.HTTP_201_CREATED)
def create_booking(
    booking: PujaBookingCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        return crud_pujas.create_booking(db, booking, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/bookings", response_model=List[PujaBooking])
def read_bookings(
    puja_date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    devotee_id: Optional[int] = None,
    status: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_pujas.get_bookings(db, tenant_id, puja_date, start_date, end_date, devotee_id, status, skip, limit)

@router.get("/bookings/{booking_id}", response_model=PujaBooking)
def read_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_booking = crud_pujas.get_booking(db, booking_id, tenant_id)
    if db_booking is None:
        raise HTTPException(status_code=404, detail=BOOKING_NOT_FOUND)
    return db_booking

@router.patch("/bookings/{booking_id}", response_model=PujaBooking)
def update_booking(
    booking_id: int,
    booking: PujaBookingUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        db_booking = crud_pujas.update_booking(db, booking_id, booking, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if db_booking is None:
        raise HTTPException(status_code=404, detail=BOOKING_NOT_FOUND)
    return db_booking

@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if not crud_pujas.delete_booking(db, booking_id, tenant_id, get_user_identifier(user)):
        raise HTTPException(status_code=404, detail=BOOKING_NOT_FOUND)
    return None

@router.patch("/{puja_id}", response_model=Puja)
def update_puja(
    puja_id: int,
    puja: PujaUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_puja = crud_pujas.update_puja(db, puja_id, puja, tenant_id, get_user_identifier(user))
    if db_puja is None:
        raise HTTPException(status_code=404, detail="Puja not found")
    return db_puja
