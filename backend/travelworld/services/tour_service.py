"""Tour service — catalogue CRUD and the public search contract."""

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.errors import DuplicateKey
from travelworld.models.tour import Tour
from travelworld.schemas.common import PageParams
from travelworld.schemas.tour import TourCreate, TourUpdate
from travelworld.services.common import get_or_404, violated_constraint

logger = logging.getLogger(__name__)

_TITLE_CONSTRAINT = "tours_title_key"


async def _flush_tour(session: AsyncSession, tour: Tour) -> Tour:
    try:
        async with session.begin_nested():
            session.add(tour)
            await session.flush()
    except IntegrityError as exc:
        if violated_constraint(exc, _TITLE_CONSTRAINT):
            raise DuplicateKey("A tour with this title already exists", field="title") from None
        raise
    await session.refresh(tour)
    return tour


async def create_tour(session: AsyncSession, body: TourCreate) -> Tour:
    tour = await _flush_tour(session, Tour(**body.model_dump()))
    logger.info("Created tour %s (%s)", tour.id, tour.title)
    return tour


async def get_tour(session: AsyncSession, raw_id: uuid.UUID | str) -> Tour:
    """Load a tour with its reviews."""
    return await get_or_404(session, Tour, raw_id, "Tour")


async def list_tours(session: AsyncSession, page: PageParams) -> tuple[list[Tour], int]:
    total = (await session.execute(select(func.count()).select_from(Tour))).scalar_one()
    result = await session.execute(
        select(Tour)
        .order_by(Tour.created_at.desc())
        .offset(page.skip)
        .limit(page.limit)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all()), total


async def search_tours(
    session: AsyncSession,
    city: str | None = None,
    min_distance: float | None = None,
    min_group_size: int | None = None,
) -> list[Tour]:
    """Filter tours by city substring (case-insensitive), minimum distance, and minimum group size."""
    query = select(Tour)
    if city:
        query = query.where(Tour.city.ilike(f"%{_escape_like(city)}%", escape="\\"))
    if min_distance is not None:
        query = query.where(Tour.distance >= min_distance)
    if min_group_size is not None:
        query = query.where(Tour.max_group_size >= min_group_size)
    result = await session.execute(
        query.order_by(Tour.created_at.desc()).execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def featured_tours(session: AsyncSession, limit: int) -> list[Tour]:
    result = await session.execute(
        select(Tour)
        .where(Tour.featured.is_(True))
        .order_by(Tour.created_at.desc())
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def tour_locations(session: AsyncSession) -> list[Tour]:
    """Tours that have both coordinates, for the map view."""
    result = await session.execute(
        select(Tour)
        .where(Tour.lat.is_not(None), Tour.lng.is_not(None))
        .order_by(Tour.created_at.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def count_tours(session: AsyncSession) -> int:
    return (await session.execute(select(func.count()).select_from(Tour))).scalar_one()


async def update_tour(session: AsyncSession, raw_id: uuid.UUID | str, body: TourUpdate) -> Tour:
    """Apply explicitly set fields. Rating rollups are never writable here."""
    tour = await get_tour(session, raw_id)
    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field not in ("photo", "lat", "lng"):
            continue
        setattr(tour, field, value)

    tour = await _flush_tour(session, tour)
    logger.info("Updated tour %s fields %s", tour.id, sorted(update_data))
    return tour


async def delete_tour(session: AsyncSession, raw_id: uuid.UUID | str) -> Tour:
    """Delete a tour; its reviews go with it."""
    tour = await get_tour(session, raw_id)
    await session.delete(tour)
    await session.flush()
    logger.info("Deleted tour %s", tour.id)
    return tour


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
