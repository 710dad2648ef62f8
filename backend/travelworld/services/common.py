"""Helpers shared by the resource services."""

import uuid
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.database import Base
from travelworld.errors import InvalidIdentifier, NotFound

ModelT = TypeVar("ModelT", bound=Base)


def parse_object_id(raw: uuid.UUID | str, label: str = "resource") -> uuid.UUID:
    """Parse a path identifier, raising ``InvalidIdentifier`` before any store access."""
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw).strip())
    except (ValueError, AttributeError):
        raise InvalidIdentifier(f"Invalid {label} ID format") from None


async def get_or_404(
    session: AsyncSession,
    model: type[ModelT],
    raw_id: uuid.UUID | str,
    label: str,
) -> ModelT:
    """Load ``model`` by id with fresh attributes, or raise ``NotFound``."""
    object_id = parse_object_id(raw_id, label.lower())
    result = await session.execute(
        select(model).where(model.id == object_id).execution_options(populate_existing=True)
    )
    obj = result.scalar_one_or_none()
    if obj is None:
        raise NotFound(f"{label} not found")
    return obj


def violated_constraint(exc: IntegrityError, *names: str) -> str | None:
    """Return which of ``names`` the driver reported in ``exc``, if any."""
    detail = str(exc.orig) if exc.orig is not None else str(exc)
    for name in names:
        if name in detail:
            return name
    return None
