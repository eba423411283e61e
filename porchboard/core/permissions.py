"""
RBAC and tenant isolation guards

Both guards are plain functions over an explicit ``Identity``: they either
return ``None`` or raise ``Forbidden``. Role and tenant are independent
checks and a protected operation must pass both.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable
import uuid

from porchboard.core.exceptions import Forbidden
from porchboard.models.user import UserRole


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, resolved once per request"""
    user_id: uuid.UUID
    city_id: uuid.UUID
    role: UserRole
    email: str


class Permission(str, Enum):
    """Permission definitions"""
    # Event permissions
    EVENT_CREATE = "event:create"
    EVENT_MODERATE = "event:moderate"

    # City permissions
    CITY_BRANDING_EDIT = "city:branding_edit"
    CITY_ANALYTICS_VIEW = "city:analytics_view"

    # Billing permissions
    SUBSCRIPTION_MANAGE = "subscription:manage"

    # User management permissions
    USER_LIST = "user:list"
    USER_ROLE_EDIT = "user:role_edit"


ADMIN_ONLY = frozenset({UserRole.ADMIN})

# Operation -> roles allowed to invoke it
ROLE_POLICIES: Dict[Permission, FrozenSet[UserRole]] = {
    Permission.EVENT_CREATE: frozenset({UserRole.ADMIN, UserRole.EVENT_CREATOR}),
    Permission.EVENT_MODERATE: ADMIN_ONLY,
    Permission.CITY_BRANDING_EDIT: ADMIN_ONLY,
    Permission.CITY_ANALYTICS_VIEW: ADMIN_ONLY,
    Permission.SUBSCRIPTION_MANAGE: ADMIN_ONLY,
    Permission.USER_LIST: ADMIN_ONLY,
    Permission.USER_ROLE_EDIT: ADMIN_ONLY,
}


def get_permissions_for_role(role: UserRole) -> set[Permission]:
    """Get permissions for a given role"""
    return {permission for permission, roles in ROLE_POLICIES.items() if role in roles}


def has_role(identity: Identity, allowed_roles: Iterable[UserRole]) -> bool:
    return identity.role in set(allowed_roles)


def require_role(identity: Identity, allowed_roles: Iterable[UserRole]) -> None:
    """Deny unless the caller's role is in the allowed set"""
    if not has_role(identity, allowed_roles):
        raise Forbidden("Insufficient permissions")


def require_permission(identity: Identity, permission: Permission) -> None:
    """Check the caller's role against the policy table"""
    require_role(identity, ROLE_POLICIES[permission])


def is_same_tenant(identity: Identity, resource_city_id: uuid.UUID) -> bool:
    return identity.city_id == resource_city_id


def require_same_tenant(identity: Identity, resource_city_id: uuid.UUID, resource: str = "resource") -> None:
    """Deny access to resources owned by another city"""
    if not is_same_tenant(identity, resource_city_id):
        raise Forbidden(f"Not authorized to access this {resource}")
