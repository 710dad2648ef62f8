"""Reviews API router — one review per user per tour."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.api.deps import ensure_owner_or_admin, get_db, page_params, require_auth
from travelworld.auth.jwt import Identity
from travelworld.config import settings
from travelworld.schemas.common import Envelope, PageParams
from travelworld.schemas.review import ReviewCreate, ReviewResponse, ReviewStatistics, TourReviews
from travelworld.services import review_service

router = APIRouter(prefix=f"{settings.api_prefix}/reviews", tags=["reviews"])


@router.post(
    "/tour/{tour_id}",
    response_model=Envelope[ReviewResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Review a tour",
)
async def create_review(
    tour_id: str,
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_auth),
) -> Envelope[ReviewResponse]:
    """Post the caller's review. The tour rating is recomputed before responding."""
    review = await review_service.create_review(db, tour_id, body, identity)
    return Envelope[ReviewResponse](message="Review submitted", data=ReviewResponse.model_validate(review))


@router.get("/tour/{tour_id}", response_model=Envelope[TourReviews], summary="List a tour's reviews")
async def list_reviews(
    tour_id: str,
    page: PageParams = Depends(page_params(10)),
    db: AsyncSession = Depends(get_db),
) -> Envelope[TourReviews]:
    reviews, total, statistics = await review_service.list_tour_reviews(db, tour_id, page)
    return Envelope[TourReviews](
        data=TourReviews(
            reviews=[ReviewResponse.model_validate(r) for r in reviews],
            pagination=page.pagination(total),
            statistics=ReviewStatistics(**statistics),
        )
    )


@router.delete("/{id}", response_model=Envelope[ReviewResponse], summary="Delete a review")
async def delete_review(
    id: str,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_auth),
) -> Envelope[ReviewResponse]:
    """Only the review's author or an admin may delete it."""
    review = await review_service.get_review(db, id)
    ensure_owner_or_admin(identity, review.user_id, "Access denied. You can only delete your own reviews.")
    review = await review_service.delete_review(db, review)
    return Envelope[ReviewResponse](message="Review deleted", data=ReviewResponse.model_validate(review))
