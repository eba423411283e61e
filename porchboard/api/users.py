"""
Users API endpoints
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from datetime import datetime
import structlog
import uuid

from porchboard.api.auth import email_taken
from porchboard.core.auth import hash_password, verify_password
from porchboard.core.database import commit_or_conflict, get_session
from porchboard.core.dependencies import get_current_identity, requires
from porchboard.core.exceptions import Conflict, NotFound, Unauthorized, ValidationError
from porchboard.core.permissions import Identity, Permission, require_same_tenant
from porchboard.models.city import City
from porchboard.models.user import User
from porchboard.schemas import (
    RoleUpdate,
    UserProfileResponse,
    UserResponse,
    UserUpdate,
    success,
)
from porchboard.schemas.user import CitySummary

logger = structlog.get_logger(__name__)
router = APIRouter()

EMAIL_IN_USE = "Email already in use"


def _load_self(session: Session, identity: Identity) -> User:
    user = session.get(User, identity.user_id)
    if not user:
        raise NotFound("User not found")
    return user


@router.get("/me")
async def get_current_user_info(
    identity: Identity = Depends(get_current_identity),
    session: Session = Depends(get_session)
):
    """Get current user info with their city"""
    user = _load_self(session, identity)
    city = session.get(City, user.city_id)

    profile = UserProfileResponse.model_validate(user)
    if city:
        profile.city = CitySummary.model_validate(city)
    return success(profile)


@router.patch("/me")
async def update_current_user(
    user_update: UserUpdate,
    identity: Identity = Depends(get_current_identity),
    session: Session = Depends(get_session)
):
    """Update own name, email or password"""
    user = _load_self(session, identity)

    if user_update.name:
        user.name = user_update.name

    if user_update.email and user_update.email != user.email:
        if email_taken(session, user_update.email):
            raise Conflict(EMAIL_IN_USE)
        user.email = user_update.email

    if user_update.new_password:
        if not user_update.current_password:
            raise ValidationError("Current password is required to set a new password")
        if not verify_password(user_update.current_password, user.password_hash):
            raise Unauthorized("Current password is incorrect")
        user.password_hash = hash_password(user_update.new_password)

    user.updated_at = datetime.utcnow()
    session.add(user)
    commit_or_conflict(session, EMAIL_IN_USE)
    session.refresh(user)

    logger.info(f"User updated own profile: {user.id}")
    return success(UserResponse.model_validate(user))


@router.get("/city/{city_id}")
async def list_city_users(
    city_id: uuid.UUID,
    identity: Identity = Depends(requires(Permission.USER_LIST)),
    session: Session = Depends(get_session)
):
    """List users of a city, newest first"""
    require_same_tenant(identity, city_id, "city")

    users = session.exec(
        select(User)
        .where(User.city_id == city_id)
        .order_by(User.created_at.desc())
    ).all()
    return success([UserResponse.model_validate(u) for u in users])


@router.patch("/{user_id}/role")
async def update_user_role(
    user_id: uuid.UUID,
    role_update: RoleUpdate,
    identity: Identity = Depends(requires(Permission.USER_ROLE_EDIT)),
    session: Session = Depends(get_session)
):
    """Change another user's role within the admin's city"""
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    require_same_tenant(identity, user.city_id, "user")

    if user.id == identity.user_id:
        raise ValidationError("Cannot modify your own role")

    user.role = role_update.role
    user.updated_at = datetime.utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"User {user.id} role changed to {user.role.value} by {identity.user_id}")
    return success(UserResponse.model_validate(user))
