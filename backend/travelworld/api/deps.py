"""Shared API dependencies — single import point for all routers.

Re-exports database session and access-control dependencies so that router
modules can import everything they need from one place::

    from travelworld.api.deps import get_db, require_auth, page_params
"""

from collections.abc import Callable

from fastapi import Query

from travelworld.auth.dependencies import (
    ensure_owner_or_admin,
    get_current_user,
    optional_auth,
    require_admin,
    require_auth,
    require_owner_or_admin,
)
from travelworld.database import get_db
from travelworld.schemas.common import PageParams
from travelworld.services.storage import get_image_store

__all__ = [
    "get_db",
    "get_current_user",
    "get_image_store",
    "require_auth",
    "require_admin",
    "require_owner_or_admin",
    "optional_auth",
    "ensure_owner_or_admin",
    "page_params",
]


def page_params(default_limit: int = 10) -> Callable[..., PageParams]:
    """Build a ``?page=&limit=`` dependency with a resource-specific default limit."""

    def dependency(
        page: int = Query(1, ge=1, description="1-indexed page number"),
        limit: int = Query(default_limit, ge=1, le=100, description="Page size"),
    ) -> PageParams:
        return PageParams(page=page, limit=limit)

    return dependency
