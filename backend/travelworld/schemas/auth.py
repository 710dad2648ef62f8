"""Pydantic v2 request/response schemas for authentication endpoints."""

from pydantic import AliasChoices, EmailStr, Field

from travelworld.schemas.common import RequestModel, ResponseModel
from travelworld.schemas.user import UserResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class RegisterRequest(RequestModel):
    """Schema for user registration."""

    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    photo: str | None = Field(None, max_length=512)


class LoginRequest(RequestModel):
    """Schema for login with either email or username, sent as ``identifier`` or ``email``."""

    identifier: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("identifier", "email"),
    )
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(RequestModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AuthResponse(ResponseModel):
    """User + bearer token returned on register/login."""

    success: bool = True
    message: str
    token: str
    token_type: str = "bearer"
    role: str
    data: UserResponse


class AuthStatusResponse(ResponseModel):
    success: bool = True
    is_authenticated: bool
    user: dict | None = None
