"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from warden.core.errors import AuthorizationError
from warden.core.security import decode_access_token
from warden.db.session import get_db
from warden.models.user import ADMIN_ROLES, User
from warden.services.auth_service import get_user_by_email

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User:
    """Require authenticated user. Raises 401 if not authenticated."""
    if not credentials:
        raise _unauthorized("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise _unauthorized("Invalid or expired token")
    user = get_user_by_email(db, payload["sub"])
    if not user:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("User is inactive")
    return user


def get_optional_user(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User | None:
    """Like get_current_user, but anonymous requests get None instead of 401."""
    if not credentials:
        return None
    return get_current_user(db, credentials)


def require_admin(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    """Require current user to be an admin (can review reports and override status)."""
    if current_user.role not in ADMIN_ROLES:
        raise AuthorizationError("Only admins can perform this action")
    return current_user
