"""Billing API endpoints — plan catalog and subscription state resolution."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_now
from app.billing.dates import TimeUnit
from app.billing.plans import (
    ORDERED_PLANS,
    get_next_paid_plan_id,
    get_subscription_plan_name,
    get_subscription_plan_order,
    get_subscription_plan_type,
    get_subscription_product_plan_name,
    is_subscription_paid_plan,
)
from app.config import settings
from app.models.subscription import UnresolvedSubscription
from app.schemas.billing import (
    PlanResponse,
    PlansListResponse,
    SubscriptionStateRequest,
    SubscriptionStateResponse,
)
from app.services.subscription_service import (
    get_subscription_next_paid_plan_id,
    get_subscription_product_plan_name_from_state,
    get_subscription_state_from_string,
    get_subscription_state_string,
    get_subscription_time_remaining,
    is_subscription_expired,
    is_subscription_paid,
    is_subscription_trial,
    is_subscription_trial_or_paid_from_state,
    resolve_subscription,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/billing", tags=["billing"])


@router.get("/plans", response_model=PlansListResponse)
async def list_plans() -> PlansListResponse:
    """List every plan in tier order (public — no auth required)."""
    return PlansListResponse(
        plans=[
            PlanResponse(
                id=plan_id,
                order=get_subscription_plan_order(plan_id),
                display_name=get_subscription_plan_name(plan_id),
                product_name=get_subscription_product_plan_name(plan_id),
                plan_type=get_subscription_plan_type(plan_id),
                is_paid=is_subscription_paid_plan(plan_id),
                next_paid_plan=get_next_paid_plan_id(plan_id),
            )
            for plan_id in ORDERED_PLANS
        ]
    )


@router.post("/subscription/state", response_model=SubscriptionStateResponse)
async def resolve_subscription_state(
    body: SubscriptionStateRequest,
    unit: TimeUnit | None = Query(default=None),
    now: datetime = Depends(get_now),
) -> SubscriptionStateResponse:
    """Resolve the lifecycle state of a subscription snapshot and derive its facts."""
    snapshot = UnresolvedSubscription(
        account=body.account,
        active_organization=body.active_organization,
        plan=body.plan,
        state=get_subscription_state_from_string(body.state),
    )
    subscription = resolve_subscription(snapshot, now=now)
    unit = unit or settings.time_remaining_default_unit
    state_string = get_subscription_state_string(subscription.state)

    logger.info(
        "Resolved subscription: actual=%s, effective=%s, state=%s",
        subscription.plan.actual.id,
        subscription.plan.effective.id,
        state_string,
    )

    return SubscriptionStateResponse(
        state=state_string,
        plan_id=subscription.plan.actual.id,
        effective_plan_id=subscription.plan.effective.id,
        product_name=get_subscription_product_plan_name_from_state(
            subscription.state,
            subscription.plan.actual.id,
            subscription.plan.effective.id,
        ),
        is_paid=is_subscription_paid(subscription),
        is_trial=is_subscription_trial(subscription, now=now),
        is_expired=is_subscription_expired(subscription, now=now),
        is_trial_or_paid=is_subscription_trial_or_paid_from_state(subscription.state),
        time_remaining=get_subscription_time_remaining(subscription, unit, now=now),
        time_remaining_unit=unit,
        next_paid_plan=get_subscription_next_paid_plan_id(subscription),
    )
