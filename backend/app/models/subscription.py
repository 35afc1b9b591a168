"""Subscription model — immutable snapshot of a user's plans and account."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.billing.dates import ensure_aware

SubscriptionPlanId = Literal[
    "community",
    "community-with-account",
    "student",
    "pro",
    "advanced",
    "teams",
    "enterprise",
]
PaidSubscriptionPlanId = Literal["student", "pro", "advanced", "teams", "enterprise"]

SubscriptionStateString = Literal[
    "free",
    "trial",
    "trial-expired",
    "trial-reactivation-eligible",
    "verification",
    "paid",
    "unknown",
]


class SubscriptionState(Enum):
    """Lifecycle state of a subscription. Internal — use the state string on the wire."""

    Community = "community"
    Trial = "trial"
    TrialExpired = "trial-expired"
    TrialReactivationEligible = "trial-reactivation-eligible"
    VerificationRequired = "verification-required"
    Paid = "paid"


class UnresolvedSubscriptionError(ValueError):
    """Raised when a resolved subscription is required but ``state`` is missing."""

    def __init__(self, message: str = "Subscription state has not been resolved.") -> None:
        super().__init__(message)


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    @field_validator("*", mode="after")
    @classmethod
    def _aware_datetimes(cls, value: object) -> object:
        # Naive timestamps from the sync layer are UTC
        if isinstance(value, datetime):
            return ensure_aware(value)
        return value


class SubscriptionPlan(_Snapshot):
    """One plan assignment at a point in time."""

    id: SubscriptionPlanId
    name: str
    bundle: bool = False
    cancelled: bool = False
    organization_id: str | None = None
    trial_reactivation_count: int = Field(default=0, ge=0)
    next_trial_opt_in_date: datetime | None = None
    started_on: datetime
    expires_on: datetime | None = None


class SubscriptionPlans(_Snapshot):
    """The contracted (``actual``) and access-granting (``effective``) plans."""

    actual: SubscriptionPlan
    effective: SubscriptionPlan


class SubscriptionAccount(_Snapshot):
    id: str
    name: str
    email: str | None = None
    verified: bool = True
    created_on: datetime | None = None


class SubscriptionOrganization(_Snapshot):
    id: str
    name: str


class UnresolvedSubscription(_Snapshot):
    """A subscription as handed over by the sync layer; ``state`` may be absent."""

    account: SubscriptionAccount | None = None
    active_organization: SubscriptionOrganization | None = None
    plan: SubscriptionPlans
    state: SubscriptionState | None = None


class Subscription(UnresolvedSubscription):
    """A subscription whose ``state`` has been resolved."""

    state: SubscriptionState

    def __repr__(self) -> str:
        account_id = self.account.id if self.account is not None else None
        return (
            f"<Subscription(account={account_id}, actual={self.plan.actual.id}, "
            f"effective={self.plan.effective.id}, state={self.state.name})>"
        )
