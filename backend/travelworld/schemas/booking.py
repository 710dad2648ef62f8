"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime

from pydantic import Field, field_validator

from travelworld.schemas.common import RequestModel, ResponseModel


class BookingCreate(RequestModel):
    """Schema for booking a tour. Owner, email, and price come from the server."""

    tour_id: uuid.UUID
    full_name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=5, max_length=50)
    guest_size: int = Field(..., ge=1)
    book_at: date

    @field_validator("book_at")
    @classmethod
    def check_not_in_past(cls, value: date) -> date:
        """A tour cannot be booked for a day that has already passed."""
        if value < date.today():
            raise ValueError("bookAt cannot be in the past")
        return value


class BookingResponse(ResponseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    user_email: str
    tour_id: uuid.UUID | None = None
    tour_name: str
    full_name: str
    phone: str
    guest_size: int
    book_at: date
    total_price: float
    created_at: datetime
    updated_at: datetime
