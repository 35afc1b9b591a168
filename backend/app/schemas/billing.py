"""Pydantic v2 request/response schemas for billing endpoints."""

from pydantic import BaseModel

from app.billing.plans import PlanName, PlanType
from app.models.subscription import (
    PaidSubscriptionPlanId,
    SubscriptionAccount,
    SubscriptionOrganization,
    SubscriptionPlanId,
    SubscriptionPlans,
    SubscriptionStateString,
)

# --- Request schemas ---


class SubscriptionStateRequest(BaseModel):
    """A subscription snapshot to resolve; ``state`` uses the wire strings."""

    account: SubscriptionAccount | None = None
    active_organization: SubscriptionOrganization | None = None
    plan: SubscriptionPlans
    state: SubscriptionStateString | None = None  # explicit override


# --- Response schemas ---


class PlanResponse(BaseModel):
    """Plan details for display."""

    id: SubscriptionPlanId
    order: int
    display_name: PlanName
    product_name: str
    plan_type: PlanType
    is_paid: bool
    next_paid_plan: PaidSubscriptionPlanId


class PlansListResponse(BaseModel):
    """All plans, lowest tier first."""

    plans: list[PlanResponse]


class SubscriptionStateResponse(BaseModel):
    """Derived facts for a subscription snapshot."""

    state: SubscriptionStateString
    plan_id: SubscriptionPlanId
    effective_plan_id: SubscriptionPlanId
    product_name: str
    is_paid: bool
    is_trial: bool
    is_expired: bool
    is_trial_or_paid: bool
    time_remaining: int | None  # None = never expires
    time_remaining_unit: str
    next_paid_plan: PaidSubscriptionPlanId
