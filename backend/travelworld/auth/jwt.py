"""JWT access token creation and verification."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from travelworld.config import settings
from travelworld.errors import InvalidToken


@dataclass(frozen=True)
class Identity:
    """The caller resolved from a verified token."""

    id: uuid.UUID
    role: str
    username: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def create_access_token(
    user_id: uuid.UUID | str,
    role: str,
    username: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed bearer token for a user.

    Args:
        user_id: The user's UUID; stored in the ``sub`` claim.
        role: The user's role at issue time.
        username: Optional display name carried for denormalized writes.
        expires_delta: Custom expiration duration. Defaults to
            ``settings.token_expire_days`` days.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.token_expire_days))
    to_encode = {
        "sub": str(user_id),
        "role": role,
        "exp": expire,
        "iat": now,
    }
    if username is not None:
        to_encode["username"] = username
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def verify_token(token: str) -> Identity:
    """Verify a bearer token and return the identity it carries.

    Raises:
        InvalidToken: On a bad signature, expiry, malformed token, or claims
            without a UUID subject and a role.
    """
    try:
        payload = decode_token(token)
    except JWTError:
        raise InvalidToken() from None

    sub = payload.get("sub")
    role = payload.get("role")
    if not sub or not role:
        raise InvalidToken()

    try:
        user_id = uuid.UUID(str(sub))
    except ValueError:
        raise InvalidToken() from None

    return Identity(id=user_id, role=role, username=payload.get("username"))
