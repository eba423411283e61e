"""
Pydantic schemas for subscriptions
"""

from pydantic import BaseModel
from typing import Any, Dict, Optional

from porchboard.models.city import SubscriptionTier
from porchboard.services.plans import BillingInterval


class SubscriptionCreate(BaseModel):
    tier: SubscriptionTier
    interval: BillingInterval


class CheckoutSessionResponse(BaseModel):
    session_id: str
    url: Optional[str] = None


class SubscriptionResponse(BaseModel):
    """Mirrored tier, its plan, and the processor's current subscription"""
    tier: SubscriptionTier
    plan: Dict[str, Any]
    subscription: Optional[Dict[str, Any]] = None
