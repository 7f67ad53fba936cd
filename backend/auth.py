from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from starlette import status
import logging
from database import get_db
from schemas.users import UserRegister, UserLogin, Token, UserProfile
from crud import users as crud_users
from utils.tenancy import get_tenant_id
from utils.auth_utils import create_access_token, get_current_user, get_user_id

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

db_dependency = Annotated[Session, Depends(get_db)]

@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register_user(
    user: UserRegister,
    db: db_dependency,
    tenant_id: str = Depends(get_tenant_id)
):
    try:
        new_user = crud_users.register_user(db, user, tenant_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    access_token = create_access_token(data=crud_users.token_claims(new_user))
    return Token(access_token=access_token, token_type="bearer")

@router.post("/login", response_model=Token)
def login(
    credentials: UserLogin,
    db: db_dependency
):
    db_user = crud_users.authenticate_user(db, credentials.email, credentials.password)
    if not db_user:
        logger.warning(f"Failed login attempt for {credentials.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")
    access_token = create_access_token(data=crud_users.token_claims(db_user))
    return Token(access_token=access_token, token_type="bearer")

@router.get("/me", response_model=UserProfile)
def read_me(
    db: db_dependency,
    user: dict = Depends(get_current_user)
):
    db_user = crud_users.get_user(db, get_user_id(user), user.get("tenant_id"))
    if not db_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return crud_users.to_profile(db_user)
