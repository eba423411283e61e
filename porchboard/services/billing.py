"""
Stripe billing service
Creates subscription checkouts and reconciles webhook notifications onto the
city's mirrored subscription tier
"""

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
from datetime import datetime
from typing import Any, Dict, Optional
import json
import uuid
import stripe
import structlog

from porchboard.core.config import Settings, get_settings
from porchboard.core.database import get_session
from porchboard.core.exceptions import ValidationError
from porchboard.models.city import City, SubscriptionTier
from porchboard.models.webhook_event import WebhookEvent
from porchboard.services.plans import (
    SUBSCRIPTION_PLANS,
    BillingInterval,
    calculate_subscription_amount,
)

logger = structlog.get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
PAYMENT_FAILED = "invoice.payment_failed"

STRIPE_INTERVALS = {"monthly": "month", "yearly": "year"}


def _as_dict(obj: Any) -> Dict[str, Any]:
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


class BillingService:
    """Stripe subscription billing for cities"""

    def __init__(self, session: Session, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()

    def _get_stripe(self):
        """Configure and return the Stripe module"""
        stripe.api_key = self.settings.STRIPE_SECRET_KEY
        return stripe

    # Checkout

    def get_or_create_customer(self, city: City, email: str) -> str:
        """Return the city's Stripe customer id, creating the customer on first use"""
        if city.stripe_customer_id:
            return city.stripe_customer_id

        customer = self._get_stripe().Customer.create(
            email=email,
            metadata={"city_id": str(city.id)},
        )
        city.stripe_customer_id = customer["id"]
        city.updated_at = datetime.utcnow()
        self.session.add(city)
        self.session.commit()
        self.session.refresh(city)

        logger.info(f"Created Stripe customer for city {city.id}")
        return city.stripe_customer_id

    def create_checkout_session(
        self,
        city: City,
        email: str,
        tier: SubscriptionTier,
        interval: BillingInterval,
    ) -> Dict[str, Any]:
        """
        Create a subscription-mode Checkout Session for a tier

        The tier and city travel in the session metadata so the webhook can
        apply the purchase once Stripe confirms it.

        Returns:
            Dict with session_id and url
        """
        customer_id = self.get_or_create_customer(city, email)
        plan = SUBSCRIPTION_PLANS[tier]
        amount = calculate_subscription_amount(tier, interval)

        checkout = self._get_stripe().checkout.Session.create(
            customer=customer_id,
            payment_method_types=["card"],
            mode="subscription",
            line_items=[
                {
                    "price_data": {
                        "currency": self.settings.STRIPE_CURRENCY,
                        "product_data": {
                            "name": f"{plan['name']} Plan - {interval}",
                            "description": ", ".join(plan["features"]),
                        },
                        "unit_amount": amount * 100,
                        "recurring": {"interval": STRIPE_INTERVALS[interval]},
                    },
                    "quantity": 1,
                }
            ],
            success_url=f"{self.settings.FRONTEND_URL}/subscription/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{self.settings.FRONTEND_URL}/subscription/cancel",
            metadata={"city_id": str(city.id), "tier": tier.value},
        )

        logger.info(f"Checkout session created for city {city.id}: tier={tier.value} interval={interval}")
        return {"session_id": checkout["id"], "url": checkout["url"]}

    def get_subscription_snapshot(self, city: City) -> Optional[Dict[str, Any]]:
        """Latest Stripe subscription for the city's customer, if any"""
        if not city.stripe_customer_id:
            return None

        subscriptions = self._get_stripe().Subscription.list(
            customer=city.stripe_customer_id,
            limit=1,
        )
        if not subscriptions.data:
            return None
        return _as_dict(subscriptions.data[0])

    # Webhooks

    def construct_event(self, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
        """Verify the Stripe signature over the raw payload and return the event as a dict"""
        if not sig_header:
            raise ValidationError("No Stripe signature found")

        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                body,
                sig_header,
                self.settings.STRIPE_WEBHOOK_SECRET,
                stripe.Webhook.DEFAULT_TOLERANCE,
            )
            event = json.loads(body)
        except ValueError:
            raise ValidationError("Invalid webhook payload")
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Stripe webhook signature verification failed: {e}")
            raise ValidationError("Webhook signature verification failed")

        return event if isinstance(event, dict) else {}

    def handle_webhook_event(self, event: Dict[str, Any]) -> str:
        """
        Apply a verified Stripe event

        Redelivered events are recognised by id and not applied again. Events
        of an unexpected shape are acknowledged and left alone.

        Returns:
            "applied", "ignored" or "duplicate"
        """
        event_id = event.get("id")
        event_type = event.get("type")

        if not event_id or not isinstance(event_id, str):
            logger.warning(f"Webhook without an event id ignored (type={event_type})")
            return "ignored"

        if self.session.get(WebhookEvent, event_id):
            logger.info(f"Duplicate webhook {event_id} ({event_type}), already processed")
            return "duplicate"

        data = event.get("data")
        data_object = data.get("object") if isinstance(data, dict) else None
        if not isinstance(data_object, dict):
            data_object = {}

        if event_type == CHECKOUT_COMPLETED:
            result = self.apply_checkout_completed(data_object)
        elif event_type == PAYMENT_FAILED:
            # TODO: notify the city's admins once an email channel exists
            logger.warning(
                f"Subscription payment failed for customer {data_object.get('customer')}"
            )
            result = "ignored"
        else:
            logger.info(f"Unhandled webhook type: {event_type}")
            result = "ignored"

        self.session.add(WebhookEvent(id=event_id, event_type=str(event_type or "unknown")))
        try:
            self.session.commit()
        except IntegrityError:
            # Concurrent delivery of the same event already recorded it
            self.session.rollback()
            return "duplicate"

        return result

    def apply_checkout_completed(self, checkout: Any) -> str:
        """Overwrite the city's tier with the tier bought in checkout"""
        metadata = checkout.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        city_id = metadata.get("city_id")
        tier = metadata.get("tier")

        try:
            city = self.session.get(City, uuid.UUID(str(city_id)))
            new_tier = SubscriptionTier(tier)
        except ValueError:
            logger.warning(f"Checkout metadata not usable: city_id={city_id} tier={tier}")
            return "ignored"

        if city is None:
            logger.warning(f"Checkout completed for unknown city {city_id}")
            return "ignored"

        city.subscription_tier = new_tier
        if checkout.get("customer") and not city.stripe_customer_id:
            city.stripe_customer_id = checkout.get("customer")
        city.updated_at = datetime.utcnow()
        self.session.add(city)

        logger.info(f"City {city.id} subscription tier set to {new_tier.value}")
        return "applied"


def get_billing_service(session: Session = Depends(get_session)) -> BillingService:
    """Dependency to get the billing service"""
    return BillingService(session)
