"""Shared API dependencies — single import point for all routers.

Re-exports database session, authentication and plan-gating dependencies so
that router modules can import everything they need from one place::

    from gomeraway.api.deps import get_db, get_current_active_user
"""

from gomeraway.auth.dependencies import (
    get_current_active_user,
    get_current_user,
    get_optional_user,
)
from gomeraway.billing.dependencies import (
    enforce_listing_limit,
    get_listing_limits,
)
from gomeraway.database import get_db

__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_optional_user",
    "get_listing_limits",
    "enforce_listing_limit",
]
