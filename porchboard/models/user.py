"""
User model with roles and city scoping
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
import uuid
from enum import Enum


class UserRole(str, Enum):
    """User roles for RBAC"""
    ADMIN = "ADMIN"
    EVENT_CREATOR = "EVENT_CREATOR"
    VISITOR = "VISITOR"


class User(SQLModel, table=True):
    """User model with city isolation"""

    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    city_id: uuid.UUID = Field(foreign_key="cities.id", index=True, description="Owning city, fixed at registration")

    # Authentication
    email: str = Field(unique=True, index=True, nullable=False, max_length=255)
    password_hash: str = Field(nullable=False)

    # Profile
    name: str = Field(nullable=False, max_length=255)

    # RBAC
    role: UserRole = Field(default=UserRole.EVENT_CREATOR, nullable=False, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
