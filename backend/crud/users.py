import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy.orm import Session, joinedload

from models.users import User, UserProfile
from schemas.users import UserRegister
from crud import devotees as crud_devotees
from crud.audit_log import log_change

logger = logging.getLogger(__name__)

bcrypt_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ADMIN = "admin"
USER = "user"


def get_user(db: Session, user_id: int, tenant_id: str) -> Optional[User]:
    return db.query(User).options(joinedload(User.profile)).filter(User.id == user_id, User.tenant_id == tenant_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).options(joinedload(User.profile)).filter(User.email == email.lower()).first()


def get_users(db: Session, tenant_id: str, skip: int = 0, limit: int = 100):
    return db.query(User).options(joinedload(User.profile)).filter(
        User.tenant_id == tenant_id
    ).order_by(User.email).offset(skip).limit(limit).all()


def to_profile(user: User) -> dict:
    profile = user.profile
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "tenant_id": user.tenant_id,
        "is_active": user.is_active,
        "role": profile.role if profile else USER,
        "devotee_id": profile.devotee_id if profile else None,
        "created_at": user.created_at,
    }


def register_user(db: Session, user: UserRegister, tenant_id: str) -> User:
    """The first account of a temple becomes its admin."""
    if get_user_by_email(db, user.email):
        raise ValueError("An account with this email already exists")
    is_first = db.query(User.id).filter(User.tenant_id == tenant_id).first() is None
    db_user = User(
        email=user.email.lower(),
        hashed_password=bcrypt_context.hash(user.password),
        full_name=user.full_name,
        tenant_id=tenant_id,
        is_active=True,
        created_by=user.email.lower(),
    )
    db_user.profile = UserProfile(role=ADMIN if is_first else USER)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"User {db_user.email} registered for tenant {tenant_id} as {db_user.profile.role}")
    return db_user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    db_user = get_user_by_email(db, email)
    if not db_user or not db_user.is_active:
        return None
    if not bcrypt_context.verify(password, db_user.hashed_password):
        return None
    return db_user


def token_claims(user: User) -> dict:
    role = user.profile.role if user.profile else USER
    return {
        "sub": user.email,
        "email": user.email,
        "user_id": user.id,
        "tenant_id": user.tenant_id,
        "groups": [role],
    }


def _profile_for(db: Session, db_user: User) -> UserProfile:
    if not db_user.profile:
        db_user.profile = UserProfile(role=USER)
        db.flush()
    return db_user.profile


def set_role(db: Session, user_id: int, role: str, tenant_id: str, changed_by: str) -> Optional[User]:
    db_user = get_user(db, user_id, tenant_id)
    if not db_user:
        return None
    profile = _profile_for(db, db_user)
    old_values = {"role": profile.role}
    profile.role = role
    profile.updated_by = changed_by
    log_change(db, tenant_id, 'user_profiles', profile, changed_by, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_user)
    return db_user


def link_devotee(db: Session, user_id: int, devotee_id: Optional[int], tenant_id: str, changed_by: str) -> Optional[User]:
    db_user = get_user(db, user_id, tenant_id)
    if not db_user:
        return None
    if devotee_id is not None and not crud_devotees.get_devotee(db, devotee_id, tenant_id):
        raise ValueError(f"Devotee {devotee_id} not found")
    profile = _profile_for(db, db_user)
    old_values = {"devotee_id": profile.devotee_id}
    profile.devotee_id = devotee_id
    profile.updated_by = changed_by
    log_change(db, tenant_id, 'user_profiles', profile, changed_by, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_user)
    return db_user


def auto_link_by_mobile(db: Session, user_id: int, mobile_number: str, tenant_id: str) -> dict:
    """Link the user to the devotee whose mobile number matches exactly."""
    db_user = get_user(db, user_id, tenant_id)
    if not db_user:
        raise ValueError("User not found")
    devotee = crud_devotees.find_by_mobile(db, tenant_id, mobile_number.strip())
    if not devotee:
        return {"linked": False, "devotee_id": None}
    profile = _profile_for(db, db_user)
    profile.devotee_id = devotee.id
    profile.updated_by = db_user.email
    db.commit()
    logger.info(f"User {db_user.email} linked to devotee {devotee.devotee_code} by mobile number")
    return {"linked": True, "devotee_id": devotee.id}
