"""Auth API router — register, login, logout, me, token checks, password change."""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.api.deps import get_current_user, get_db, optional_auth, require_auth
from travelworld.auth.jwt import Identity, create_access_token
from travelworld.config import settings
from travelworld.models.user import User
from travelworld.schemas.auth import (
    AuthResponse,
    AuthStatusResponse,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
)
from travelworld.schemas.common import Envelope, MessageResponse
from travelworld.schemas.user import UserResponse
from travelworld.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/auth", tags=["auth"])


def _issue(user: User, message: str) -> AuthResponse:
    token = create_access_token(user.id, user.role, user.username)
    return AuthResponse(
        message=message,
        token=token,
        role=user.role,
        data=UserResponse.model_validate(user),
    )


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.auth_cookie_name,
        token,
        max_age=settings.token_expire_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        secure=not settings.is_development,
    )


# ---------------------------------------------------------------------------
# POST /register
# ---------------------------------------------------------------------------


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Register a new account. The role is always ``user``."""
    user = await user_service.register_user(db, body)
    return _issue(user, "User registered successfully!")


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Authenticate with email or username; also sets the ``accessToken`` cookie."""
    user = await user_service.authenticate(db, body.identifier, body.password)
    result = _issue(user, "Successfully logged in")
    _set_auth_cookie(response, result.token)
    return result


# ---------------------------------------------------------------------------
# Session helpers
# ---------------------------------------------------------------------------


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, identity: Identity = Depends(require_auth)) -> MessageResponse:
    """Clear the auth cookie. Issued tokens stay valid until they expire."""
    response.delete_cookie(settings.auth_cookie_name, httponly=True, samesite="lax")
    logger.info("User %s logged out", identity.id)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=Envelope[UserResponse])
async def me(user: User = Depends(get_current_user)) -> Envelope[UserResponse]:
    """Return the authenticated caller's profile."""
    return Envelope[UserResponse](data=UserResponse.model_validate(user))


@router.get("/verify")
async def verify(identity: Identity = Depends(require_auth)) -> dict:
    """Confirm that the presented token is valid."""
    return {
        "success": True,
        "message": "Token is valid",
        "user": {"id": str(identity.id), "username": identity.username, "role": identity.role},
    }


@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(identity: Identity | None = Depends(optional_auth)) -> AuthStatusResponse:
    """Report whether the caller is logged in, never rejecting the request."""
    if identity is None:
        return AuthStatusResponse(is_authenticated=False)
    return AuthStatusResponse(
        is_authenticated=True,
        user={"id": str(identity.id), "username": identity.username, "role": identity.role},
    )


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Replace the caller's password after checking the current one."""
    await user_service.change_password(db, user, body.current_password, body.new_password)
    return MessageResponse(message="Password updated successfully")
