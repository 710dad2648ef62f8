"""Derived fields recomputed from child collections.

* Tour ``ratingsAverage`` / ``ratingsQuantity`` from the tour's reviews.
* Experience ``likes`` / ``likedBy`` toggled under a row lock.
"""

import logging
import uuid
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.errors import NotFound
from travelworld.models.experience import Experience, ExperienceLike
from travelworld.models.review import Review
from travelworld.models.tour import Tour

logger = logging.getLogger(__name__)


def round_rating(value: float | Decimal) -> float:
    """Round half-up to one decimal place (4.25 -> 4.3)."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def summarize_ratings(ratings: Iterable[int]) -> tuple[float, int]:
    """Return ``(average, count)``; ``(0.0, 0)`` when there are no ratings."""
    values = list(ratings)
    if not values:
        return 0.0, 0
    return round_rating(Decimal(sum(values)) / len(values)), len(values)


def rating_distribution(ratings: Iterable[int]) -> dict[str, int]:
    """Count ratings per star, always including every star from 1 to 5."""
    distribution = {str(star): 0 for star in range(1, 6)}
    for rating in ratings:
        key = str(rating)
        if key in distribution:
            distribution[key] += 1
    return distribution


async def recompute_tour_rating(session: AsyncSession, tour_id: uuid.UUID) -> tuple[float, int] | None:
    """Recompute and store a tour's average rating and review count.

    Best effort: a failure is logged and ``None`` returned so the review
    write that triggered it still succeeds.
    """
    try:
        async with session.begin_nested():
            ratings = (await session.scalars(select(Review.rating).where(Review.tour_id == tour_id))).all()
            average, count = summarize_ratings(ratings)
            await session.execute(
                update(Tour)
                .where(Tour.id == tour_id)
                .values(ratings_average=average, ratings_quantity=count)
            )
    except SQLAlchemyError:
        logger.exception("Failed to recompute rating for tour %s", tour_id)
        return None

    logger.info("Tour %s rating recomputed: %.1f from %d reviews", tour_id, average, count)
    return average, count


async def toggle_like(
    session: AsyncSession,
    experience_id: uuid.UUID,
    user_id: uuid.UUID,
) -> tuple[Experience, bool]:
    """Add or remove ``user_id`` from an experience's ``likedBy`` set.

    The experience row is locked for the rest of the transaction, so
    concurrent toggles serialize and ``likes`` always equals the size of the
    membership set.

    Returns:
        The refreshed experience and whether the user now likes it.
    """
    result = await session.execute(
        select(Experience)
        .where(Experience.id == experience_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    experience = result.scalar_one_or_none()
    if experience is None:
        raise NotFound("Experience not found")

    removed = await session.execute(
        delete(ExperienceLike)
        .where(ExperienceLike.experience_id == experience_id, ExperienceLike.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    liked = removed.rowcount == 0
    if liked:
        await session.execute(
            pg_insert(ExperienceLike)
            .values(experience_id=experience_id, user_id=user_id)
            .on_conflict_do_nothing(index_elements=["experience_id", "user_id"])
        )

    likes = await session.scalar(
        select(func.count()).select_from(ExperienceLike).where(ExperienceLike.experience_id == experience_id)
    )
    experience.likes = likes or 0
    await session.flush()
    await session.refresh(experience, attribute_names=["likers", "likes", "updated_at"])

    logger.info("User %s %s experience %s", user_id, "liked" if liked else "unliked", experience_id)
    return experience, liked


async def recount_likes(session: AsyncSession, experience_ids: Iterable[uuid.UUID]) -> None:
    """Reset ``likes`` to the membership count, e.g. after likers were deleted."""
    ids = list(experience_ids)
    if not ids:
        return
    like_count = (
        select(func.count())
        .select_from(ExperienceLike)
        .where(ExperienceLike.experience_id == Experience.id)
        .scalar_subquery()
    )
    await session.execute(
        update(Experience)
        .where(Experience.id.in_(ids))
        .values(likes=like_count)
        .execution_options(synchronize_session=False)
    )
