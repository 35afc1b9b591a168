"""Plan definitions — tier ordering, upgrade targets and plan names."""

from datetime import datetime
from typing import Literal, cast

from app.billing.dates import utcnow
from app.config import settings
from app.models.subscription import (
    PaidSubscriptionPlanId,
    SubscriptionPlan,
    SubscriptionPlanId,
)

PlanName = Literal["Community", "Student", "Pro", "Advanced", "Business", "Enterprise"]
PlanType = Literal["STUDENT", "PRO", "ADVANCED", "BUSINESS", "ENTERPRISE"]

# Ascending entitlement. Order here is the only source of plan rank.
ORDERED_PLANS: tuple[SubscriptionPlanId, ...] = (
    "community",
    "community-with-account",
    "student",
    "pro",
    "advanced",
    "teams",
    "enterprise",
)
ORDERED_PAID_PLANS: tuple[PaidSubscriptionPlanId, ...] = (
    "student",
    "pro",
    "advanced",
    "teams",
    "enterprise",
)

# Opaque host routes, passed through untouched.
SUBSCRIPTION_UPDATED_URI_PATH_PREFIX = "did-update-subscription"
AI_ALL_ACCESS_OPT_IN_PATH_PREFIX = "ai-all-access-opt-in"

_PLAN_NAMES: dict[str, PlanName] = {
    "community": "Community",
    "community-with-account": "Community",
    "student": "Student",
    "pro": "Pro",
    "advanced": "Advanced",
    "teams": "Business",
    "enterprise": "Enterprise",
}

_PLAN_TYPES: dict[str, PlanType] = {
    "student": "STUDENT",
    "pro": "PRO",
    "advanced": "ADVANCED",
    "teams": "BUSINESS",
    "enterprise": "ENTERPRISE",
}


def get_subscription_plan_order(plan_id: SubscriptionPlanId | None) -> int:
    """Rank of a plan in the catalog; -1 when absent or unknown."""
    if plan_id is None or plan_id not in ORDERED_PLANS:
        return -1
    return ORDERED_PLANS.index(plan_id)


def compare_subscription_plans(
    plan_a: SubscriptionPlanId | None, plan_b: SubscriptionPlanId | None
) -> int:
    """Negative if ``plan_a`` is a lower tier than ``plan_b``, 0 if equal, positive if higher."""
    return get_subscription_plan_order(plan_a) - get_subscription_plan_order(plan_b)


def is_subscription_paid_plan(plan_id: SubscriptionPlanId | None) -> bool:
    """True if the plan represents a paying customer."""
    return plan_id in ORDERED_PAID_PLANS


def get_next_paid_plan_id(plan_id: SubscriptionPlanId | None) -> PaidSubscriptionPlanId:
    """Paid plan one step above ``plan_id``.

    Plans outside the paid catalog count as the student slot, so the
    suggestion skips student (eligibility cannot be checked) and lands on
    pro. Past the top tier the suggestion stays at enterprise.
    """
    if is_subscription_paid_plan(plan_id):
        position = ORDERED_PAID_PLANS.index(cast(PaidSubscriptionPlanId, plan_id))
    else:
        position = 0

    next_position = position + 1
    if next_position >= len(ORDERED_PAID_PLANS):
        return "enterprise"
    return ORDERED_PAID_PLANS[next_position]


def get_subscription_plan_name(plan_id: SubscriptionPlanId | None) -> PlanName:
    """Display name for a plan. Defaults to Pro if unknown."""
    return _PLAN_NAMES.get(plan_id or "", "Pro")


def get_subscription_plan_type(plan_id: SubscriptionPlanId | None) -> PlanType:
    """Enum value for the ``planType`` query param. Defaults to PRO if unknown."""
    return _PLAN_TYPES.get(plan_id or "", "PRO")


def get_subscription_product_plan_name(plan_id: SubscriptionPlanId | None) -> str:
    """Fully qualified product name, e.g. ``Tierline Pro``."""
    return f"{settings.product_name} {get_subscription_plan_name(plan_id)}"


def get_subscription_plan(
    plan_id: SubscriptionPlanId,
    bundle: bool,
    trial_reactivation_count: int,
    organization_id: str | None,
    started_on: datetime | None = None,
    expires_on: datetime | None = None,
    cancelled: bool = False,
    next_trial_opt_in_date: datetime | None = None,
) -> SubscriptionPlan:
    """Build a plan snapshot from primitive fields. ``started_on`` defaults to now."""
    return SubscriptionPlan(
        id=plan_id,
        name=get_subscription_product_plan_name(plan_id),
        bundle=bundle,
        cancelled=cancelled,
        organization_id=organization_id,
        trial_reactivation_count=trial_reactivation_count,
        next_trial_opt_in_date=next_trial_opt_in_date,
        started_on=started_on or utcnow(),
        expires_on=expires_on,
    )
