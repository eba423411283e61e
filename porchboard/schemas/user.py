"""
Pydantic schemas for users and authentication
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
import uuid

from porchboard.models.city import SubscriptionTier
from porchboard.models.user import UserRole

# Roles that can be chosen at registration or granted by an admin
ASSIGNABLE_ROLES = (UserRole.ADMIN, UserRole.EVENT_CREATOR)


def _assignable(role: UserRole) -> UserRole:
    if role not in ASSIGNABLE_ROLES:
        raise ValueError("role must be ADMIN or EVENT_CREATOR")
    return role


class UserCreate(BaseModel):
    """User registration schema"""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    name: str = Field(..., min_length=2, max_length=255)
    city_id: uuid.UUID
    role: UserRole

    check_role = field_validator("role")(_assignable)


class UserLogin(BaseModel):
    """User login schema"""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=100)


class UserResponse(BaseModel):
    """User response model"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    name: str
    role: UserRole
    city_id: uuid.UUID
    created_at: datetime


class AuthResponse(BaseModel):
    """Identity plus bearer token"""
    user: UserResponse
    token: str


class CitySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    domain: str
    subscription_tier: SubscriptionTier


class UserProfileResponse(UserResponse):
    """Current user with a summary of their city"""
    city: Optional[CitySummary] = None


class UserUpdate(BaseModel):
    """Self-service profile update"""
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(default=None, min_length=8, max_length=100)


class RoleUpdate(BaseModel):
    """Admin role change for another user"""
    role: UserRole

    check_role = field_validator("role")(_assignable)
