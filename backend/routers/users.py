from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.users import UserProfile, RoleUpdate, DevoteeLink, MobileLinkRequest, MobileLinkResult
from crud import users as crud_users
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_current_user, get_user_identifier, get_user_id

router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"

@router.get("/", response_model=List[UserProfile])
def read_users(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return [crud_users.to_profile(u) for u in crud_users.get_users(db, tenant_id, skip, limit)]

@router.post("/me/link-devotee", response_model=MobileLinkResult)
def auto_link_devotee(
    request: MobileLinkRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    """Link the signed-in user to the devotee registered with this mobile number, if any."""
    try:
        return crud_users.auto_link_by_mobile(db, get_user_id(user), request.mobile_number, tenant_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.put("/{user_id}/role", response_model=UserProfile)
def update_role(
    user_id: int,
    request: RoleUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if user_id == get_user_id(user) and request.role != crud_users.ADMIN:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot remove your own admin role")
    db_user = crud_users.set_role(db, user_id, request.role, tenant_id, get_user_identifier(user))
    if not db_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    logger.info(f"User {db_user.email} is now {request.role} (changed by {get_user_identifier(user)})")
    return crud_users.to_profile(db_user)

@router.put("/{user_id}/devotee", response_model=UserProfile)
def link_devotee(
    user_id: int,
    request: DevoteeLink,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        db_user = crud_users.link_devotee(db, user_id, request.devotee_id, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not db_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    return crud_users.to_profile(db_user)
