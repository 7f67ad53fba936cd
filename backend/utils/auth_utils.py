from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Any
import logging
import os

from fastapi import HTTPException, status, Request
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# === Token Configuration ===
# Override these through the environment in every deployed instance.
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "720"))


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a JWT carrying the given claims plus an `exp` claim."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token validation failed: {e}"
        )


def get_current_user(request: Request) -> Dict[str, Any]:
    """
    FastAPI dependency to validate the bearer JWT from the Authorization header.

    Usage:
        @router.get("/secure-data")
        def secure_endpoint(user: dict = Depends(get_current_user)):
            ...
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is missing",
        )

    # The token is expected to be in the format "Bearer <token>"
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    payload = decode_access_token(parts[1])
    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is missing the subject claim",
        )

    # A token only works for the temple it was issued for.
    requested_tenant = (request.headers.get("X-Tenant-ID") or "").strip()
    if requested_tenant and payload.get("tenant_id") != requested_tenant:
        logger.warning(f"User {payload.get('sub')} of tenant {payload.get('tenant_id')} tried to act on tenant {requested_tenant}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token does not belong to this tenant",
        )
    return payload


def get_user_identifier(user: Dict[str, Any]) -> str:
    """The value stored in created_by / updated_by / reconciled_by columns."""
    if not user:
        return "system"
    return user.get("email") or user.get("sub") or "unknown"


def require_group(allowed_groups: List[str]):
    """
    Dependency factory that only lets through users whose `groups` claim
    intersects `allowed_groups`.

    Usage:
        user: dict = Depends(require_group(["admin"]))
    """
    def dependency(request: Request) -> Dict[str, Any]:
        user = get_current_user(request)
        user_groups = set(user.get("groups") or [])
        if not user_groups.intersection(allowed_groups):
            logger.warning(f"User {get_user_identifier(user)} denied; needs one of {allowed_groups}, has {sorted(user_groups)}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action",
            )
        return user

    return dependency


def get_user_id(user: Dict[str, Any]) -> int:
    """Numeric users.id from the `user_id` claim; needed wherever rows are owned by a user."""
    user_id = user.get("user_id") if user else None
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is missing the user_id claim",
        )
    return int(user_id)
