"""
Pydantic schemas for cities
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
import uuid

from porchboard.models.city import SubscriptionTier


class Branding(BaseModel):
    """Board look and feel"""
    primary_color: str
    secondary_color: str
    font: str
    footer_text: str


class CityCreate(BaseModel):
    """City creation schema"""
    name: str = Field(..., min_length=2, max_length=255)
    domain: str = Field(..., min_length=3, max_length=255)
    branding: Branding
    subscription_tier: SubscriptionTier = SubscriptionTier.STARTER


class CityResponse(BaseModel):
    """City response model"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    domain: str
    branding: dict
    subscription_tier: SubscriptionTier
    created_at: datetime
    updated_at: Optional[datetime] = None


class AnalyticsPeriod(BaseModel):
    start: datetime
    end: datetime


class CityAnalytics(BaseModel):
    """Event counts by status for a creation window"""
    total_events: int
    pending_events: int
    approved_events: int
    rejected_events: int
    flagged_events: int
    period: AnalyticsPeriod
