"""Pydantic v2 request/response schemas for user endpoints."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, Field

from travelworld.schemas.common import RequestModel, ResponseModel


class UserCreate(RequestModel):
    """Admin-only user creation; the only path that may set ``role``."""

    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    photo: str | None = Field(None, max_length=512)
    role: Literal["user", "admin"] = "user"


class UserUpdate(RequestModel):
    """Partial profile update.

    ``password`` and ``role`` are accepted for shape compatibility but are
    always discarded by the user service.
    """

    username: str | None = Field(None, min_length=3, max_length=50)
    email: EmailStr | None = None
    photo: str | None = Field(None, max_length=512)
    password: str | None = None
    role: str | None = None


class UserResponse(ResponseModel):
    """Public user profile. Never includes the password hash."""

    id: uuid.UUID
    username: str
    email: str
    photo: str | None = None
    role: str
    created_at: datetime
    updated_at: datetime
