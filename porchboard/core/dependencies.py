"""
Authentication dependencies for FastAPI
"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session
from typing import Optional
import structlog

from porchboard.core.auth import verify_token
from porchboard.core.database import get_session
from porchboard.core.exceptions import Unauthorized
from porchboard.core.permissions import Identity, Permission, require_permission
from porchboard.models.user import User

logger = structlog.get_logger(__name__)
security = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: Session = Depends(get_session)
) -> Identity:
    """Resolve the bearer token to an identity loaded from the database"""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Authentication required")

    user_id = verify_token(credentials.credentials)
    if user_id is None:
        raise Unauthorized("Invalid token")

    user = session.get(User, user_id)
    if not user:
        raise Unauthorized("User not found")

    logger.debug(f"User authenticated: {user.id}")
    return Identity(
        user_id=user.id,
        city_id=user.city_id,
        role=user.role,
        email=user.email,
    )


def requires(permission: Permission):
    """Dependency factory: authenticate, then check the role policy"""
    async def check_permission(identity: Identity = Depends(get_current_identity)) -> Identity:
        require_permission(identity, permission)
        return identity
    return check_permission
