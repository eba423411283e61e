"""
Subscription API endpoints - Stripe checkout and webhook reconciliation
"""

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session
import structlog

from porchboard.core.database import get_session
from porchboard.core.dependencies import requires
from porchboard.core.exceptions import NotFound
from porchboard.core.permissions import Identity, Permission
from porchboard.models.city import City
from porchboard.schemas import (
    CheckoutSessionResponse,
    SubscriptionCreate,
    SubscriptionResponse,
    success,
)
from porchboard.services.billing import BillingService, get_billing_service
from porchboard.services.plans import SUBSCRIPTION_PLANS

logger = structlog.get_logger(__name__)
router = APIRouter()


def _load_city(session: Session, identity: Identity) -> City:
    city = session.get(City, identity.city_id)
    if not city:
        raise NotFound("City not found")
    return city


@router.post("")
def create_subscription(
    subscription: SubscriptionCreate,
    identity: Identity = Depends(requires(Permission.SUBSCRIPTION_MANAGE)),
    billing: BillingService = Depends(get_billing_service),
    session: Session = Depends(get_session)
):
    """
    Start a Stripe Checkout for the admin's city

    Plain def so FastAPI runs it in the threadpool; the Stripe calls block.
    """
    city = _load_city(session, identity)
    checkout = billing.create_checkout_session(
        city=city,
        email=identity.email,
        tier=subscription.tier,
        interval=subscription.interval,
    )
    return success(CheckoutSessionResponse(**checkout))


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    billing: BillingService = Depends(get_billing_service)
):
    """
    Handle Stripe webhook notifications

    Authenticated by the Stripe signature instead of a bearer token. Once the
    signature checks out the notification is acknowledged, whatever its type.
    """
    payload = await request.body()
    event = billing.construct_event(payload, request.headers.get("stripe-signature"))

    logger.info(f"Received Stripe webhook {event.get('id')}: {event.get('type')}")
    result = billing.handle_webhook_event(event)
    logger.info(f"Stripe webhook {event.get('id')} {result}")

    return {"received": True}


@router.get("")
def get_subscription(
    identity: Identity = Depends(requires(Permission.SUBSCRIPTION_MANAGE)),
    billing: BillingService = Depends(get_billing_service),
    session: Session = Depends(get_session)
):
    """Current tier, its plan, and the Stripe subscription if one exists"""
    city = _load_city(session, identity)
    return success(SubscriptionResponse(
        tier=city.subscription_tier,
        plan=SUBSCRIPTION_PLANS[city.subscription_tier],
        subscription=billing.get_subscription_snapshot(city),
    ))
