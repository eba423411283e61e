from porchboard.models.city import City, SubscriptionTier
from porchboard.models.user import User, UserRole
from porchboard.models.event import Event, EventStatus, InvalidTransition, initial_status_for
from porchboard.models.webhook_event import WebhookEvent
