"""
Subscription plan catalogue
"""

from typing import Dict, Literal

from porchboard.models.city import SubscriptionTier

BillingInterval = Literal["monthly", "yearly"]


SUBSCRIPTION_PLANS: Dict[SubscriptionTier, dict] = {
    SubscriptionTier.STARTER: {
        "tier": SubscriptionTier.STARTER.value,
        "name": "Starter",
        "price": {"monthly": 49, "yearly": 490},
        "features": [
            "Up to 100 events/month",
            "Basic analytics",
            "Email support",
            "Custom domain",
            "Basic branding options",
        ],
    },
    SubscriptionTier.PRO: {
        "tier": SubscriptionTier.PRO.value,
        "name": "Professional",
        "price": {"monthly": 99, "yearly": 990},
        "features": [
            "Up to 500 events/month",
            "Advanced analytics",
            "Priority support",
            "Custom domain",
            "Advanced branding options",
            "Event categories customization",
            "Multiple admin accounts",
        ],
    },
    SubscriptionTier.PREMIER: {
        "tier": SubscriptionTier.PREMIER.value,
        "name": "Premier",
        "price": {"monthly": 199, "yearly": 1990},
        "features": [
            "Unlimited events",
            "Real-time analytics",
            "24/7 priority support",
            "Custom domain",
            "Full branding customization",
            "API access",
            "White-label option",
            "Dedicated account manager",
        ],
    },
}


def calculate_subscription_amount(tier: SubscriptionTier, interval: BillingInterval) -> int:
    """Whole-dollar price for a tier and billing interval"""
    return SUBSCRIPTION_PLANS[SubscriptionTier(tier)]["price"][interval]
