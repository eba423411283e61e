"""
City model - the tenant of the platform
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid


class SubscriptionTier(str, Enum):
    """Subscription tiers a city can be billed for"""
    STARTER = "STARTER"
    PRO = "PRO"
    PREMIER = "PREMIER"


class City(SQLModel, table=True):
    """City model for multi-tenant architecture"""

    __tablename__ = "cities"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(unique=True, index=True, max_length=255)
    slug: str = Field(unique=True, index=True, max_length=255, description="Derived from name")
    domain: str = Field(unique=True, index=True, max_length=255, description="Domain the board is served on")

    # Branding: logo, primary_color, secondary_color, font, footer_text
    branding: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    # Billing mirror; Stripe holds the authoritative subscription
    subscription_tier: SubscriptionTier = Field(default=SubscriptionTier.STARTER, nullable=False)
    stripe_customer_id: Optional[str] = Field(default=None, index=True, max_length=255)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
