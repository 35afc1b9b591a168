"""Subscription service — lifecycle state resolution and derived subscription facts.

Every function here is a pure read of the snapshot it is given. The state is
decided by ``SUBSCRIPTION_STATE_RULES``: an ordered list of
``(predicate, state)`` pairs where the first matching predicate wins and the
last one always matches.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from app.billing.dates import TimeUnit, ensure_aware, get_time_remaining, utcnow
from app.billing.plans import (
    compare_subscription_plans,
    get_next_paid_plan_id,
    get_subscription_plan,
    get_subscription_product_plan_name,
    is_subscription_paid_plan,
)
from app.config import settings
from app.models.subscription import (
    PaidSubscriptionPlanId,
    Subscription,
    SubscriptionPlanId,
    SubscriptionPlans,
    SubscriptionState,
    SubscriptionStateString,
    UnresolvedSubscription,
    UnresolvedSubscriptionError,
)

logger = logging.getLogger(__name__)

_STATE_STRINGS: dict[SubscriptionState, SubscriptionStateString] = {
    SubscriptionState.VerificationRequired: "verification",
    SubscriptionState.Community: "free",
    SubscriptionState.Trial: "trial",
    SubscriptionState.TrialExpired: "trial-expired",
    SubscriptionState.TrialReactivationEligible: "trial-reactivation-eligible",
    SubscriptionState.Paid: "paid",
}

_STATES_BY_STRING: dict[str, SubscriptionState] = {
    string: state for state, string in _STATE_STRINGS.items()
}

_TRIAL_OR_PAID_STATES = frozenset(
    {
        SubscriptionState.Trial,
        SubscriptionState.TrialExpired,
        SubscriptionState.TrialReactivationEligible,
        SubscriptionState.Paid,
    }
)


@dataclass(frozen=True)
class StateEvaluation:
    """Inputs a state rule is evaluated against."""

    subscription: UnresolvedSubscription
    now: datetime
    trial_reactivation_limit: int


StateRule = tuple[Callable[[StateEvaluation], bool], SubscriptionState]


def _has_elapsed(moment: datetime | None, now: datetime) -> bool:
    return moment is not None and moment <= now


def _is_elevated(subscription: UnresolvedSubscription) -> bool:
    """True when the effective plan grants more than the contracted one."""
    plans = subscription.plan
    return compare_subscription_plans(plans.effective.id, plans.actual.id) > 0


def _needs_verification(ev: StateEvaluation) -> bool:
    account = ev.subscription.account
    return account is not None and not account.verified


def _trial_lapsed(ev: StateEvaluation) -> bool:
    actual = ev.subscription.plan.actual
    effective = ev.subscription.plan.effective
    if is_subscription_paid_plan(actual.id):
        return False
    if _is_elevated(ev.subscription) and _has_elapsed(effective.expires_on, ev.now):
        return True
    return _has_elapsed(actual.expires_on, ev.now)


def _can_reactivate_trial(ev: StateEvaluation) -> bool:
    actual = ev.subscription.plan.actual
    effective = ev.subscription.plan.effective
    reactivations = max(actual.trial_reactivation_count, effective.trial_reactivation_count)
    if reactivations >= ev.trial_reactivation_limit:
        return False
    opt_in_date = effective.next_trial_opt_in_date or actual.next_trial_opt_in_date
    return _has_elapsed(opt_in_date, ev.now)


def _trial_expired(ev: StateEvaluation) -> bool:
    return _trial_lapsed(ev) and not _can_reactivate_trial(ev)


def _trial_reactivation_eligible(ev: StateEvaluation) -> bool:
    return _trial_lapsed(ev) and _can_reactivate_trial(ev)


def _in_trial(ev: StateEvaluation) -> bool:
    expires_on = ev.subscription.plan.effective.expires_on
    return (
        _is_elevated(ev.subscription)
        and expires_on is not None
        and expires_on > ev.now
    )


def _paid_and_active(ev: StateEvaluation) -> bool:
    actual = ev.subscription.plan.actual
    return (
        is_subscription_paid_plan(actual.id)
        and not actual.cancelled
        and not _has_elapsed(actual.expires_on, ev.now)
    )


def _always(ev: StateEvaluation) -> bool:
    return True


SUBSCRIPTION_STATE_RULES: tuple[StateRule, ...] = (
    (_needs_verification, SubscriptionState.VerificationRequired),
    (_trial_expired, SubscriptionState.TrialExpired),
    (_trial_reactivation_eligible, SubscriptionState.TrialReactivationEligible),
    (_in_trial, SubscriptionState.Trial),
    (_paid_and_active, SubscriptionState.Paid),
    (_always, SubscriptionState.Community),
)


def compute_subscription_state(
    subscription: UnresolvedSubscription,
    *,
    now: datetime | None = None,
) -> SubscriptionState:
    """Decide the lifecycle state of a snapshot, ignoring any ``state`` it carries."""
    ev = StateEvaluation(
        subscription=subscription,
        now=ensure_aware(now or utcnow()),
        trial_reactivation_limit=settings.trial_reactivation_limit,
    )
    for predicate, state in SUBSCRIPTION_STATE_RULES:
        if predicate(ev):
            logger.debug(
                "Subscription state %s (rule %s, actual=%s, effective=%s)",
                state.name,
                predicate.__name__,
                subscription.plan.actual.id,
                subscription.plan.effective.id,
            )
            return state
    # The last rule always matches
    raise AssertionError("no subscription state rule matched")


def _state_of(subscription: UnresolvedSubscription, now: datetime | None) -> SubscriptionState:
    if subscription.state is not None:
        return subscription.state
    return compute_subscription_state(subscription, now=now)


def resolve_subscription(
    subscription: UnresolvedSubscription,
    *,
    now: datetime | None = None,
) -> Subscription:
    """Return the snapshot with ``state`` populated. An existing state is kept."""
    if isinstance(subscription, Subscription):
        return subscription
    return Subscription(
        account=subscription.account,
        active_organization=subscription.active_organization,
        plan=subscription.plan,
        state=_state_of(subscription, now),
    )


def assert_subscription_state(subscription: UnresolvedSubscription) -> Subscription:
    """Narrow to a resolved ``Subscription``.

    This is a contract check on the caller, not a validation of the
    subscription's content: it only confirms that ``state`` is populated and
    raises ``UnresolvedSubscriptionError`` if it is not.
    """
    if isinstance(subscription, Subscription):
        return subscription
    if subscription.state is None:
        raise UnresolvedSubscriptionError()
    return Subscription(
        account=subscription.account,
        active_organization=subscription.active_organization,
        plan=subscription.plan,
        state=subscription.state,
    )


def get_subscription_state_string(state: SubscriptionState | None) -> SubscriptionStateString:
    """Wire-safe string for a state; ``unknown`` for None."""
    if state is None:
        return "unknown"
    return _STATE_STRINGS.get(state, "unknown")


def get_subscription_state_from_string(
    value: SubscriptionStateString | None,
) -> SubscriptionState | None:
    """Parse a wire state string; None for ``unknown`` or a missing value."""
    if value is None:
        return None
    return _STATES_BY_STRING.get(value)


def is_subscription_paid(subscription: UnresolvedSubscription) -> bool:
    return is_subscription_paid_plan(subscription.plan.actual.id)


def is_subscription_expired(
    subscription: UnresolvedSubscription,
    *,
    now: datetime | None = None,
) -> bool:
    """True when the effective plan has run out and the subscription is not paid."""
    now = ensure_aware(now or utcnow())
    if not _has_elapsed(subscription.plan.effective.expires_on, now):
        return False
    return _state_of(subscription, now) != SubscriptionState.Paid


def is_subscription_trial(
    subscription: UnresolvedSubscription,
    *,
    now: datetime | None = None,
) -> bool:
    return _state_of(subscription, now) == SubscriptionState.Trial


def is_subscription_trial_or_paid_from_state(state: SubscriptionState | None) -> bool:
    """False only for bare community accounts (and unknown states)."""
    return state in _TRIAL_OR_PAID_STATES


def get_subscription_time_remaining(
    subscription: UnresolvedSubscription,
    unit: TimeUnit | None = None,
    *,
    now: datetime | None = None,
) -> int | None:
    """Time left on the effective plan, or None if it never expires."""
    return get_time_remaining(
        subscription.plan.effective.expires_on,
        unit or settings.time_remaining_default_unit,
        now=now,
    )


def get_subscription_next_paid_plan_id(
    subscription: UnresolvedSubscription,
) -> PaidSubscriptionPlanId:
    """Upgrade target for the contracted plan."""
    return get_next_paid_plan_id(subscription.plan.actual.id)


def get_subscription_product_plan_name_from_state(
    state: SubscriptionState | None,
    plan_id: SubscriptionPlanId | None = None,
    effective_plan_id: SubscriptionPlanId | None = None,
) -> str:
    """Fully qualified plan name qualified by the subscription state."""
    if state == SubscriptionState.Trial:
        trial_plan: SubscriptionPlanId = "student" if effective_plan_id == "student" else "pro"
        return f"{get_subscription_product_plan_name(trial_plan)} Trial"
    if state in (SubscriptionState.TrialExpired, SubscriptionState.TrialReactivationEligible):
        return get_subscription_product_plan_name("community-with-account")
    if state == SubscriptionState.VerificationRequired:
        return f"{get_subscription_product_plan_name(plan_id or 'pro')} (Unverified)"
    return get_subscription_product_plan_name(plan_id or "pro")


def get_community_subscription(
    subscription: UnresolvedSubscription | None = None,
) -> Subscription:
    """Zero-entitlement baseline used when signing out or resetting.

    Keeps the start date of an existing contracted plan.
    """
    started_on = subscription.plan.actual.started_on if subscription is not None else utcnow()
    plan = get_subscription_plan("community", False, 0, None, started_on)
    return Subscription(
        account=None,
        active_organization=None,
        plan=SubscriptionPlans(actual=plan, effective=plan),
        state=SubscriptionState.Community,
    )
