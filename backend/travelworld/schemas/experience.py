"""Pydantic v2 request/response schemas for experience endpoints.

Experiences are submitted as multipart forms, so list-valued fields
(``categories``, ``itinerary``, ``tags``, ``coordinates``) arrive as JSON
strings and are decoded by the router before validation.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import Field, field_validator

from travelworld.schemas.common import RequestModel, ResponseModel

BudgetRange = Literal["budget", "mid-range", "luxury"]

Category = Literal[
    "adventure",
    "cultural",
    "nature",
    "food",
    "photography",
    "solo-travel",
    "family",
    "romantic",
    "budget",
    "luxury",
]

SortBy = Literal["newest", "oldest", "popular", "views"]

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ItineraryDay(RequestModel):
    day: int = Field(..., ge=1)
    activities: str = Field(..., min_length=1)
    accommodation: str | None = None
    meals: str | None = None
    notes: str | None = None


def _drop_blank_days(value: list) -> list:
    """Discard itinerary entries whose activities are empty."""
    return [
        day
        for day in value
        if not isinstance(day, dict) or str(day.get("activities") or "").strip()
    ]


def _dedupe(value: list) -> list:
    return list(dict.fromkeys(value))


class ExperienceCreate(RequestModel):
    """Fields of a new experience submission (images are uploaded separately)."""

    title: str = Field(..., min_length=1, max_length=255)
    destination: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    duration: int = Field(1, ge=1)
    group_size: int = Field(1, ge=1)
    budget_range: BudgetRange
    categories: list[Category] = []
    itinerary: list[ItineraryDay] = Field(..., min_length=1)
    tips: str | None = Field(None, max_length=1000)
    best_time_to_visit: str | None = Field(None, max_length=255)
    transportation: str | None = Field(None, max_length=500)
    total_cost: Decimal | None = Field(None, ge=0)
    tags: list[str] = []
    is_published: bool = True
    coordinates: list[float] | None = Field(None, min_length=2, max_length=2)

    @field_validator("itinerary", mode="before")
    @classmethod
    def drop_blank_days(cls, value):
        if isinstance(value, list):
            return _drop_blank_days(value)
        return value

    @field_validator("categories", "tags")
    @classmethod
    def unique_entries(cls, value: list) -> list:
        return _dedupe(value)


class ExperienceUpdate(RequestModel):
    """Partial update. Newly uploaded images are appended to ``images``."""

    title: str | None = Field(None, min_length=1, max_length=255)
    destination: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    duration: int | None = Field(None, ge=1)
    group_size: int | None = Field(None, ge=1)
    budget_range: BudgetRange | None = None
    categories: list[Category] | None = None
    itinerary: list[ItineraryDay] | None = Field(None, min_length=1)
    tips: str | None = Field(None, max_length=1000)
    best_time_to_visit: str | None = Field(None, max_length=255)
    transportation: str | None = Field(None, max_length=500)
    total_cost: Decimal | None = Field(None, ge=0)
    tags: list[str] | None = None
    is_published: bool | None = None
    coordinates: list[float] | None = Field(None, min_length=2, max_length=2)
    images: list[str] | None = None

    @field_validator("itinerary", mode="before")
    @classmethod
    def drop_blank_days(cls, value):
        if isinstance(value, list):
            return _drop_blank_days(value)
        return value

    @field_validator("categories", "tags")
    @classmethod
    def unique_entries(cls, value: list | None) -> list | None:
        return _dedupe(value) if value is not None else value


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class Author(ResponseModel):
    name: str
    avatar: str
    user_id: str | None = None


class GeoPoint(ResponseModel):
    type: str = "Point"
    coordinates: list[float]


class ExperienceSummary(ResponseModel):
    """Experience as shown in listings (without the ``likedBy`` set)."""

    id: uuid.UUID
    title: str
    destination: str
    description: str
    duration: int
    group_size: int
    budget_range: str
    categories: list[str]
    itinerary: list[dict]
    tips: str | None = None
    best_time_to_visit: str | None = None
    transportation: str | None = None
    total_cost: float | None = None
    images: list[str]
    tags: list[str]
    author: Author
    likes: int
    views: int
    is_published: bool
    location: GeoPoint
    is_liked: bool = False
    created_at: datetime
    updated_at: datetime


class ExperienceResponse(ExperienceSummary):
    """Single experience including who liked it."""

    liked_by: list[str] = []


class LikeResult(ResponseModel):
    liked: bool
    likes: int
    liked_by: list[str]


class ExperienceStats(ResponseModel):
    total_experiences: int
    total_views: int
    total_likes: int
    by_budget_range: dict[str, int]
    by_category: dict[str, int]
