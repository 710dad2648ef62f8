"""Review service — one review per user per tour, with rating rollups."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.auth.jwt import Identity
from travelworld.errors import DuplicateKey, NotFound
from travelworld.models.review import REVIEW_UNIQUE_CONSTRAINT, Review
from travelworld.models.tour import Tour
from travelworld.models.user import User
from travelworld.schemas.common import PageParams
from travelworld.schemas.review import ReviewCreate
from travelworld.services.aggregation import rating_distribution, recompute_tour_rating, summarize_ratings
from travelworld.services.common import get_or_404, parse_object_id, violated_constraint

logger = logging.getLogger(__name__)


async def _ensure_tour_exists(session: AsyncSession, tour_id: uuid.UUID) -> None:
    found = (await session.execute(select(Tour.id).where(Tour.id == tour_id))).first()
    if found is None:
        raise NotFound("Tour not found")


async def create_review(
    session: AsyncSession,
    raw_tour_id: uuid.UUID | str,
    body: ReviewCreate,
    identity: Identity,
) -> Review:
    """Post a review and synchronously refresh the tour's rating rollup.

    Raises:
        DuplicateKey: The caller already reviewed this tour (enforced by the
            ``(tour_id, user_id)`` unique constraint, so concurrent attempts
            cannot both succeed).
    """
    tour_id = parse_object_id(raw_tour_id, "tour")
    await _ensure_tour_exists(session, tour_id)

    username = identity.username
    if not username:
        user = await session.get(User, identity.id)
        if user is None:
            raise NotFound("User not found")
        username = user.username

    review = Review(
        tour_id=tour_id,
        user_id=identity.id,
        username=username,
        review_text=body.review_text,
        rating=body.rating,
    )
    try:
        async with session.begin_nested():
            session.add(review)
            await session.flush()
    except IntegrityError as exc:
        if violated_constraint(exc, REVIEW_UNIQUE_CONSTRAINT):
            raise DuplicateKey("You have already reviewed this tour", field="tourId") from None
        raise
    await session.refresh(review)

    await recompute_tour_rating(session, tour_id)
    logger.info("User %s reviewed tour %s with rating %d", identity.id, tour_id, review.rating)
    return review


async def get_review(session: AsyncSession, raw_id: uuid.UUID | str) -> Review:
    return await get_or_404(session, Review, raw_id, "Review")


async def delete_review(session: AsyncSession, review: Review) -> Review:
    """Remove a review and refresh the tour's rating rollup."""
    await session.delete(review)
    await session.flush()
    await recompute_tour_rating(session, review.tour_id)
    logger.info("Deleted review %s on tour %s", review.id, review.tour_id)
    return review


async def list_tour_reviews(
    session: AsyncSession,
    raw_tour_id: uuid.UUID | str,
    page: PageParams,
) -> tuple[list[Review], int, dict]:
    """Return one page of a tour's reviews, newest first, with statistics."""
    tour_id = parse_object_id(raw_tour_id, "tour")
    await _ensure_tour_exists(session, tour_id)

    ratings = (await session.scalars(select(Review.rating).where(Review.tour_id == tour_id))).all()
    average, total = summarize_ratings(ratings)

    result = await session.execute(
        select(Review)
        .where(Review.tour_id == tour_id)
        .order_by(Review.created_at.desc())
        .offset(page.skip)
        .limit(page.limit)
    )
    statistics = {
        "average_rating": average,
        "total_reviews": total,
        "rating_distribution": rating_distribution(ratings),
    }
    return list(result.scalars().all()), total, statistics

