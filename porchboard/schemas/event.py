"""
Pydantic schemas for events
"""

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, model_validator
from typing import Literal, Optional
from datetime import datetime
import uuid

from porchboard.core.utils import to_naive_utc
from porchboard.models.event import EventStatus, FLAG_REASON_MIN_LENGTH


class Location(BaseModel):
    """Street address plus coordinates"""
    address: str
    city: str
    state: str
    zip_code: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class Recurrence(BaseModel):
    frequency: Literal["DAILY", "WEEKLY", "MONTHLY", "YEARLY"]
    interval: int = Field(..., ge=1)
    end_date: Optional[datetime] = None


class EventCreate(BaseModel):
    """Fields accepted when submitting an event"""
    title: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10)
    start_time: datetime
    end_time: datetime
    location: Location
    category: str = Field(..., min_length=1, max_length=100)
    external_link: Optional[HttpUrl] = None
    recurrence: Optional[Recurrence] = None

    @model_validator(mode="after")
    def check_time_window(self):
        self.start_time = to_naive_utc(self.start_time)
        self.end_time = to_naive_utc(self.end_time)
        if self.recurrence and self.recurrence.end_date:
            self.recurrence.end_date = to_naive_utc(self.recurrence.end_date)
        if self.start_time > self.end_time:
            raise ValueError("start_time must not be after end_time")
        return self


class EventFilter(BaseModel):
    """
    Listing filter; every field other than city_id is optional and only
    applied when present
    """
    city_id: uuid.UUID
    category: Optional[str] = None
    status: Optional[EventStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    search: Optional[str] = None

    @model_validator(mode="after")
    def normalize_bounds(self):
        self.start_date = to_naive_utc(self.start_date)
        self.end_date = to_naive_utc(self.end_date)
        if self.search is not None and not self.search.strip():
            self.search = None
        return self


class EventStatusUpdate(BaseModel):
    status: EventStatus


class EventFlag(BaseModel):
    reason: str = Field(..., min_length=FLAG_REASON_MIN_LENGTH, max_length=2000)


class CreatorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str


class EventResponse(BaseModel):
    """Event response model"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    city_id: uuid.UUID
    creator_id: uuid.UUID
    title: str
    description: str
    start_time: datetime
    end_time: datetime
    location: dict
    category: str
    external_link: Optional[str] = None
    images: list[str]
    status: EventStatus
    recurrence: Optional[dict] = None
    flag_reason: Optional[str] = None
    flagged_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    creator: Optional[CreatorSummary] = None
