"""Shared API dependencies — single import point for all routers.

The clock is a dependency so tests can pin it::

    app.dependency_overrides[get_now] = lambda: fixed_now
"""

from datetime import datetime

from app.billing.dates import utcnow


def get_now() -> datetime:
    """Current time for request handlers."""
    return utcnow()


__all__ = [
    "get_now",
]
