"""
Processed payment-processor notifications
"""

from sqlmodel import Field, SQLModel
from datetime import datetime


class WebhookEvent(SQLModel, table=True):
    """Webhook log for idempotency and debugging"""

    __tablename__ = "webhook_events"

    id: str = Field(primary_key=True, max_length=255, description="Stripe event id")
    event_type: str = Field(index=True, max_length=100)
    processed_at: datetime = Field(default_factory=datetime.utcnow, index=True)
