"""Pydantic v2 request/response schemas for review endpoints."""

import uuid
from datetime import datetime

from pydantic import Field

from travelworld.schemas.common import Pagination, RequestModel, ResponseModel


class ReviewCreate(RequestModel):
    """Schema for posting a review on a tour."""

    review_text: str = Field(..., min_length=1, max_length=5000)
    rating: int = Field(..., ge=1, le=5)


class ReviewResponse(ResponseModel):
    id: uuid.UUID
    tour_id: uuid.UUID
    user_id: uuid.UUID
    username: str
    review_text: str
    rating: int
    created_at: datetime
    updated_at: datetime


class ReviewStatistics(ResponseModel):
    average_rating: float
    total_reviews: int
    rating_distribution: dict[str, int]


class TourReviews(ResponseModel):
    """Paginated reviews of one tour plus rating statistics."""

    reviews: list[ReviewResponse]
    pagination: Pagination
    statistics: ReviewStatistics
