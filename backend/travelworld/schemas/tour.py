"""Pydantic v2 request/response schemas for tour endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import Field

from travelworld.schemas.common import RequestModel, ResponseModel
from travelworld.schemas.review import ReviewResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class TourCreate(RequestModel):
    """Schema for creating a tour (admin only)."""

    title: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=120)
    address: str = Field(..., min_length=1, max_length=255)
    distance: float = Field(..., ge=0)
    photo: str | None = Field(None, max_length=512)
    desc: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    max_group_size: int = Field(..., ge=1)
    featured: bool = False
    lat: float | None = Field(None, ge=-90, le=90)
    lng: float | None = Field(None, ge=-180, le=180)


class TourUpdate(RequestModel):
    """Schema for partially updating a tour. All fields optional."""

    title: str | None = Field(None, min_length=1, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=120)
    address: str | None = Field(None, min_length=1, max_length=255)
    distance: float | None = Field(None, ge=0)
    photo: str | None = Field(None, max_length=512)
    desc: str | None = Field(None, min_length=1)
    price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    max_group_size: int | None = Field(None, ge=1)
    featured: bool | None = None
    lat: float | None = Field(None, ge=-90, le=90)
    lng: float | None = Field(None, ge=-180, le=180)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TourResponse(ResponseModel):
    id: uuid.UUID
    title: str
    city: str
    address: str
    distance: float
    photo: str | None = None
    desc: str
    price: float
    max_group_size: int
    featured: bool
    lat: float | None = None
    lng: float | None = None
    ratings_average: float
    ratings_quantity: int
    created_at: datetime
    updated_at: datetime


class TourDetailResponse(TourResponse):
    """Single tour with its reviews, newest first."""

    reviews: list[ReviewResponse] = []


class Position(ResponseModel):
    lat: float
    lng: float


class TourLocation(ResponseModel):
    """Map marker for a tour with coordinates."""

    id: uuid.UUID
    title: str
    city: str
    address: str
    position: Position
    price: float
    distance: float
    max_group_size: int
    photo: str | None = None
    featured: bool
    ratings_average: float
    ratings_quantity: int
