"""Shared test configuration and fixtures.

Every test runs against a pinned clock (``now``) so that trial windows and
expiry boundaries are deterministic. Subscriptions are built with the
``make_plan`` / ``make_subscription`` factories relative to that instant.
"""

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_now
from app.billing.plans import get_subscription_plan
from app.main import app
from app.models.subscription import (
    SubscriptionAccount,
    SubscriptionPlan,
    SubscriptionPlans,
    UnresolvedSubscription,
)

FIXED_NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """The instant every test treats as the present."""
    return FIXED_NOW


@pytest.fixture
def make_plan(now: datetime) -> Callable[..., SubscriptionPlan]:
    """Build a plan snapshot; ``expires_in`` is relative to ``now``."""

    def _make_plan(
        plan_id: str = "community",
        *,
        expires_in: timedelta | None = None,
        cancelled: bool = False,
        trial_reactivation_count: int = 0,
        next_trial_opt_in_date: datetime | None = None,
        started_on: datetime | None = None,
    ) -> SubscriptionPlan:
        return get_subscription_plan(
            plan_id,  # type: ignore[arg-type]
            False,
            trial_reactivation_count,
            None,
            started_on=started_on or now - timedelta(days=30),
            expires_on=now + expires_in if expires_in is not None else None,
            cancelled=cancelled,
            next_trial_opt_in_date=next_trial_opt_in_date,
        )

    return _make_plan


@pytest.fixture
def account() -> SubscriptionAccount:
    """A verified account."""
    return SubscriptionAccount(
        id="acct-123",
        name="Test User",
        email="user@test.com",
        verified=True,
    )


@pytest.fixture
def make_subscription(
    make_plan: Callable[..., SubscriptionPlan],
) -> Callable[..., UnresolvedSubscription]:
    """Build an unresolved subscription from plan snapshots (or plan ids)."""

    def _make_subscription(
        actual: SubscriptionPlan | str = "community",
        effective: SubscriptionPlan | str | None = None,
        account: SubscriptionAccount | None = None,
        **kwargs: Any,
    ) -> UnresolvedSubscription:
        actual_plan = make_plan(actual) if isinstance(actual, str) else actual
        if effective is None:
            effective_plan = actual_plan
        elif isinstance(effective, str):
            effective_plan = make_plan(effective)
        else:
            effective_plan = effective
        return UnresolvedSubscription(
            account=account,
            plan=SubscriptionPlans(actual=actual_plan, effective=effective_plan),
            **kwargs,
        )

    return _make_subscription


@pytest_asyncio.fixture
async def client(now: datetime) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient with the clock pinned to ``now``."""
    app.dependency_overrides[get_now] = lambda: now

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()
