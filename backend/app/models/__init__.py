"""Domain models for Tierline.

Subscription snapshots are built by the sync layer and treated as read-only
values here; nothing in this package persists or mutates them.
"""

from app.models.subscription import (
    PaidSubscriptionPlanId,
    Subscription,
    SubscriptionAccount,
    SubscriptionOrganization,
    SubscriptionPlan,
    SubscriptionPlanId,
    SubscriptionPlans,
    SubscriptionState,
    SubscriptionStateString,
    UnresolvedSubscription,
    UnresolvedSubscriptionError,
)

__all__ = [
    "PaidSubscriptionPlanId",
    "Subscription",
    "SubscriptionAccount",
    "SubscriptionOrganization",
    "SubscriptionPlan",
    "SubscriptionPlanId",
    "SubscriptionPlans",
    "SubscriptionState",
    "SubscriptionStateString",
    "UnresolvedSubscription",
    "UnresolvedSubscriptionError",
]
