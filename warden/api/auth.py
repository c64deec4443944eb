"""Auth endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from warden.core.deps import get_current_user
from warden.core.errors import AuthenticationError, ConflictError
from warden.core.security import create_access_token
from warden.db.session import get_db
from warden.models.user import User
from warden.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserMe
from warden.services.auth_service import authenticate_user, create_user, get_user_by_email

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserMe, status_code=201)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
):
    """Register a new user. Self-registration always creates a regular USER."""
    if get_user_by_email(db, data.email):
        raise ConflictError("Email already registered", path="email")
    return create_user(db, email=data.email, password=data.password, name=data.name)


@router.post("/login", response_model=TokenResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
):
    """Login and return access token."""
    user = authenticate_user(db, data.email, data.password)
    if not user:
        raise AuthenticationError("Invalid email or password")
    return TokenResponse(access_token=create_access_token(subject=user.email, role=user.role))


@router.get("/me", response_model=UserMe)
def me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return current_user
