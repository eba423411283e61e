"""
Schemas module
"""

from porchboard.schemas.city import Branding, CityAnalytics, CityCreate, CityResponse
from porchboard.schemas.event import (
    EventCreate,
    EventFilter,
    EventFlag,
    EventResponse,
    EventStatusUpdate,
)
from porchboard.schemas.subscription import (
    CheckoutSessionResponse,
    SubscriptionCreate,
    SubscriptionResponse,
)
from porchboard.schemas.user import (
    AuthResponse,
    RoleUpdate,
    UserCreate,
    UserLogin,
    UserProfileResponse,
    UserResponse,
    UserUpdate,
)


def success(data) -> dict:
    """Wrap a payload in the standard success envelope"""
    return {"status": "success", "data": data}


__all__ = [
    "AuthResponse",
    "Branding",
    "CheckoutSessionResponse",
    "CityAnalytics",
    "CityCreate",
    "CityResponse",
    "EventCreate",
    "EventFilter",
    "EventFlag",
    "EventResponse",
    "EventStatusUpdate",
    "RoleUpdate",
    "SubscriptionCreate",
    "SubscriptionResponse",
    "UserCreate",
    "UserLogin",
    "UserProfileResponse",
    "UserResponse",
    "UserUpdate",
    "success",
]
