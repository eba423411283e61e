"""
Auth API endpoints - registration and login
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select
import structlog

from porchboard.core.auth import create_access_token, hash_password, verify_password_timing_safe
from porchboard.core.database import commit_or_conflict, get_session
from porchboard.core.exceptions import Conflict, NotFound, Unauthorized
from porchboard.models.city import City
from porchboard.models.user import User
from porchboard.schemas import AuthResponse, UserCreate, UserLogin, UserResponse, success

logger = structlog.get_logger(__name__)
router = APIRouter()

INVALID_CREDENTIALS = "Invalid credentials"
EMAIL_REGISTERED = "Email already registered"


def email_taken(session: Session, email: str) -> bool:
    return session.exec(select(User).where(User.email == email)).first() is not None


def _auth_response(user: User) -> AuthResponse:
    token = create_access_token(
        user_id=user.id,
        city_id=user.city_id,
        role=user.role.value,
    )
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserCreate,
    session: Session = Depends(get_session)
):
    """Register a new user in a city"""
    if email_taken(session, user_data.email):
        raise Conflict(EMAIL_REGISTERED)

    if not session.get(City, user_data.city_id):
        raise NotFound("City not found")

    new_user = User(
        email=user_data.email,
        password_hash=hash_password(user_data.password),
        name=user_data.name,
        city_id=user_data.city_id,
        role=user_data.role,
    )
    session.add(new_user)
    # A concurrent registration can slip past the check above
    commit_or_conflict(session, EMAIL_REGISTERED)
    session.refresh(new_user)

    logger.info(f"User registered: {new_user.id} in city {new_user.city_id}")
    return success(_auth_response(new_user))


@router.post("/login")
async def login_user(
    login_data: UserLogin,
    session: Session = Depends(get_session)
):
    """Login user; unknown email and wrong password fail identically"""
    user = session.exec(
        select(User).where(User.email == login_data.email)
    ).first()

    valid = verify_password_timing_safe(login_data.password, user.password_hash if user else None)
    if not user or not valid:
        raise Unauthorized(INVALID_CREDENTIALS)

    logger.info(f"User logged in: {user.id}")
    return success(_auth_response(user))
