"""Experience service — user-submitted experiences, listing and search.

Listing only ever returns published experiences. Pages are 1-indexed.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import func, or_, select, true, update
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.auth.jwt import Identity
from travelworld.errors import NotFound, ValidationError
from travelworld.models.experience import Experience, default_author
from travelworld.schemas.common import PageParams
from travelworld.schemas.experience import ExperienceCreate, ExperienceUpdate
from travelworld.services.aggregation import toggle_like
from travelworld.services.common import get_or_404, parse_object_id

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    "newest": (Experience.created_at.desc(),),
    "oldest": (Experience.created_at.asc(),),
    "popular": (Experience.likes.desc(), Experience.views.desc()),
    "views": (Experience.views.desc(),),
}
DEFAULT_SORT = "newest"


@dataclass(frozen=True)
class ExperienceFilter:
    category: str | None = None
    budget_range: str | None = None
    destination: str | None = None
    search: str | None = None


def _contains(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _filter_clauses(filters: ExperienceFilter) -> list:
    """Translate a filter into WHERE clauses; ``"all"`` means no constraint."""
    clauses = [Experience.is_published.is_(True)]
    if filters.category and filters.category != "all":
        clauses.append(Experience.categories.contains([filters.category]))
    if filters.budget_range and filters.budget_range != "all":
        clauses.append(Experience.budget_range == filters.budget_range)
    if filters.destination:
        clauses.append(Experience.destination.ilike(_contains(filters.destination), escape="\\"))
    if filters.search:
        pattern = _contains(filters.search)
        clauses.append(
            or_(
                Experience.title.ilike(pattern, escape="\\"),
                Experience.description.ilike(pattern, escape="\\"),
                Experience.destination.ilike(pattern, escape="\\"),
            )
        )
    return clauses


def _column_values(body: ExperienceCreate | ExperienceUpdate, exclude_unset: bool) -> dict:
    data = body.model_dump(exclude_unset=exclude_unset)
    coordinates = data.pop("coordinates", None)
    if coordinates is not None:
        data["longitude"], data["latitude"] = coordinates
    if data.get("itinerary") is not None:
        data["itinerary"] = [
            {key: value for key, value in day.items() if value is not None} for day in data["itinerary"]
        ]
    return data


async def create_experience(
    session: AsyncSession,
    body: ExperienceCreate,
    images: list[str],
    identity: Identity | None,
) -> Experience:
    """Store a new experience. Anonymous submissions get the default author."""
    author = default_author(
        identity.username if identity else None,
        identity.id if identity else None,
    )
    experience = Experience(**_column_values(body, exclude_unset=False), images=images, **author)
    session.add(experience)
    await session.flush()
    await session.refresh(experience)
    logger.info(
        "Created experience %s by %s with %d image(s)",
        experience.id,
        identity.id if identity else "anonymous",
        len(images),
    )
    return experience


async def get_experience(session: AsyncSession, raw_id: uuid.UUID | str) -> Experience:
    return await get_or_404(session, Experience, raw_id, "Experience")


def can_see(experience: Experience, identity: Identity | None) -> bool:
    """Published experiences are public; drafts only to their author and admins."""
    if experience.is_published:
        return True
    if identity is None:
        return False
    return identity.is_admin or (
        experience.author_id is not None and str(experience.author_id) == str(identity.id)
    )


async def view_experience(
    session: AsyncSession,
    raw_id: uuid.UUID | str,
    identity: Identity | None = None,
) -> Experience:
    """Load a visible experience and count the read (single-statement increment).

    Unpublished experiences look missing to everyone but their author and admins.
    """
    experience_id = parse_object_id(raw_id, "experience")
    if not can_see(await get_experience(session, experience_id), identity):
        raise NotFound("Experience not found")

    result = await session.execute(
        update(Experience)
        .where(Experience.id == experience_id)
        .values(views=Experience.views + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFound("Experience not found")
    return await get_experience(session, experience_id)


async def list_experiences(
    session: AsyncSession,
    filters: ExperienceFilter,
    sort_by: str | None,
    page: PageParams,
) -> tuple[list[Experience], int]:
    """Filter, sort and paginate published experiences."""
    clauses = _filter_clauses(filters)
    order = SORT_ORDERS.get(sort_by or DEFAULT_SORT, SORT_ORDERS[DEFAULT_SORT])

    total = (await session.execute(select(func.count()).select_from(Experience).where(*clauses))).scalar_one()
    result = await session.execute(
        select(Experience)
        .where(*clauses)
        .order_by(*order)
        .offset(page.skip)
        .limit(page.limit)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all()), total


async def popular_experiences(session: AsyncSession, limit: int) -> list[Experience]:
    items, _ = await list_experiences(session, ExperienceFilter(), "popular", PageParams(1, limit))
    return items


async def recent_experiences(session: AsyncSession, limit: int) -> list[Experience]:
    items, _ = await list_experiences(session, ExperienceFilter(), "newest", PageParams(1, limit))
    return items


async def search_suggestions(session: AsyncSession, query: str, limit: int = 10) -> list[str]:
    """Distinct published titles and destinations containing ``query``."""
    if not query.strip():
        return []
    pattern = _contains(query.strip())
    suggestions: list[str] = []
    for column in (Experience.title, Experience.destination):
        result = await session.execute(
            select(column)
            .where(Experience.is_published.is_(True), column.ilike(pattern, escape="\\"))
            .distinct()
            .order_by(column)
            .limit(limit)
        )
        for value in result.scalars():
            if value not in suggestions:
                suggestions.append(value)
    return suggestions[:limit]


async def experience_stats(session: AsyncSession) -> dict:
    """Totals over published experiences, per budget range and per category."""
    published = Experience.is_published.is_(True)
    totals = (
        await session.execute(
            select(
                func.count(Experience.id),
                func.coalesce(func.sum(Experience.views), 0),
                func.coalesce(func.sum(Experience.likes), 0),
            ).where(published)
        )
    ).one()

    by_budget = await session.execute(
        select(Experience.budget_range, func.count()).where(published).group_by(Experience.budget_range)
    )

    category = func.jsonb_array_elements_text(Experience.categories).table_valued("value").render_derived()
    by_category = await session.execute(
        select(category.c.value, func.count())
        .select_from(Experience)
        .join(category, true())
        .where(published)
        .group_by(category.c.value)
    )

    return {
        "total_experiences": totals[0],
        "total_views": int(totals[1]),
        "total_likes": int(totals[2]),
        "by_budget_range": {name: count for name, count in by_budget.all()},
        "by_category": {name: count for name, count in by_category.all()},
    }


async def update_experience(
    session: AsyncSession,
    experience: Experience,
    body: ExperienceUpdate,
    new_images: list[str],
) -> Experience:
    """Apply explicitly set fields and append newly uploaded images.

    A submitted ``images`` list may only reorder or drop the experience's own
    images; any other URL is rejected.
    """
    update_data = _column_values(body, exclude_unset=True)
    if update_data.get("images") is not None:
        foreign = [url for url in update_data["images"] if url not in experience.images]
        if foreign:
            raise ValidationError.from_fields(
                [{"field": "images", "message": "Only this experience's own images can be kept"}]
            )
        update_data["images"] = list(dict.fromkeys(update_data["images"]))
    for field, value in update_data.items():
        if value is None and field not in ("tips", "best_time_to_visit", "transportation", "total_cost"):
            continue
        setattr(experience, field, value)
    if new_images:
        experience.images = [*experience.images, *new_images]

    await session.flush()
    await session.refresh(experience)
    logger.info("Updated experience %s fields %s", experience.id, sorted(update_data))
    return experience


async def delete_experience(session: AsyncSession, experience: Experience) -> Experience:
    await session.delete(experience)
    await session.flush()
    logger.info("Deleted experience %s", experience.id)
    return experience


async def like_experience(
    session: AsyncSession,
    raw_id: uuid.UUID | str,
    identity: Identity,
) -> tuple[Experience, bool]:
    """Toggle the caller's like on an experience."""
    experience_id = parse_object_id(raw_id, "experience")
    return await toggle_like(session, experience_id, identity.id)
