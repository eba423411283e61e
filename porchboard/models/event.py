"""
Event model with moderation state machine
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON, Text
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from porchboard.models.user import UserRole


FLAG_REASON_MIN_LENGTH = 10


class EventStatus(str, Enum):
    """Moderation status of an event"""
    DRAFT = "DRAFT"             # Reserved; nothing produces or consumes it
    PENDING = "PENDING"         # Submitted by a creator, awaiting an admin
    APPROVED = "APPROVED"       # Publicly listed
    REJECTED = "REJECTED"       # Declined by an admin
    FLAGGED = "FLAGGED"         # Reported by someone, awaiting review


# Outcomes an admin may choose through the status-update operation
MODERATION_DECISIONS = frozenset({EventStatus.APPROVED, EventStatus.REJECTED})

# States a moderation decision may be applied from
MODERATABLE_STATES = frozenset({
    EventStatus.PENDING,
    EventStatus.APPROVED,
    EventStatus.REJECTED,
    EventStatus.FLAGGED,
})


class InvalidTransition(ValueError):
    """Raised when a status change is not allowed by the workflow"""


def initial_status_for(role: UserRole) -> EventStatus:
    """Status assigned at creation: admins publish directly, others queue for review"""
    if role == UserRole.ADMIN:
        return EventStatus.APPROVED
    return EventStatus.PENDING


class Event(SQLModel, table=True):
    """Event listed on a city board"""

    __tablename__ = "events"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    city_id: uuid.UUID = Field(
        foreign_key="cities.id",
        index=True,
        description="Owning city, fixed at creation"
    )
    creator_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
        description="User who submitted the event, fixed at creation"
    )

    # Content
    title: str = Field(max_length=100, nullable=False)
    description: str = Field(sa_column=Column(Text, nullable=False))
    category: str = Field(index=True, max_length=100)
    external_link: Optional[str] = Field(default=None, max_length=2048)

    # Schedule
    start_time: datetime = Field(index=True, nullable=False)
    end_time: datetime = Field(nullable=False)
    recurrence: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))

    # Address plus coordinates
    location: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    images: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # Moderation
    status: EventStatus = Field(default=EventStatus.PENDING, index=True)
    flag_reason: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    flagged_at: Optional[datetime] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: Optional[datetime] = None

    # State machine methods
    def can_moderate(self, target: EventStatus) -> tuple[bool, str]:
        """Check if an admin decision can be applied"""
        if target not in MODERATION_DECISIONS:
            return False, "Status must be APPROVED or REJECTED"

        if self.status not in MODERATABLE_STATES:
            return False, f"Cannot moderate an event in {self.status.value} status"

        return True, "Can moderate event"

    def transition_to_moderated(self, target: EventStatus) -> None:
        """Apply an admin decision (approve or reject)"""
        allowed, reason = self.can_moderate(target)
        if not allowed:
            raise InvalidTransition(reason)

        self.status = target
        self.updated_at = datetime.utcnow()

    def transition_to_flagged(self, reason: str) -> None:
        """Report the event; reachable from every status"""
        if reason is None or len(reason) < FLAG_REASON_MIN_LENGTH:
            raise InvalidTransition(
                f"Flag reason must be at least {FLAG_REASON_MIN_LENGTH} characters"
            )

        self.status = EventStatus.FLAGGED
        self.flag_reason = reason
        self.flagged_at = datetime.utcnow()
        self.updated_at = self.flagged_at

    def is_public(self) -> bool:
        return self.status == EventStatus.APPROVED
