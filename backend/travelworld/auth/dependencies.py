"""FastAPI access-control dependencies for route protection.

Each dependency evaluates one request in isolation:

* :func:`require_auth`: a valid bearer token is mandatory.
* :func:`require_admin`: the token must carry the ``admin`` role.
* :func:`require_owner_or_admin`: the ``{id}`` path parameter must be the
  caller's own user id, unless the caller is an admin.
* :func:`optional_auth`: resolves the caller when possible, never rejects.

The resolved :class:`Identity` is also stored on ``request.state.identity``.
"""

import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.auth.jwt import Identity, verify_token
from travelworld.database import get_db
from travelworld.errors import Forbidden, InvalidToken, NotFound, Unauthenticated
from travelworld.models.user import User

# auto_error=False so a missing header maps onto our own 401 instead of FastAPI's 403
_bearer_scheme = HTTPBearer(auto_error=False)


async def require_auth(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> Identity:
    """Extract and verify the Bearer token, returning the caller's identity.

    Raises:
        Unauthenticated: No ``Authorization: Bearer <token>`` header.
        InvalidToken: Signature, expiry, or claim verification failed.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()

    identity = verify_token(credentials.credentials)
    request.state.identity = identity
    return identity


async def require_admin(identity: Identity = Depends(require_auth)) -> Identity:
    """Allow only callers holding the ``admin`` role."""
    if not identity.is_admin:
        raise Forbidden("Access denied. Admins only.")
    return identity


def ensure_owner_or_admin(
    identity: Identity,
    owner_id: uuid.UUID | str | None,
    message: str = "Access denied. You can only access your own account.",
) -> None:
    """Raise ``Forbidden`` unless ``identity`` owns the resource or is an admin."""
    if identity.is_admin:
        return
    if owner_id is not None and str(owner_id).lower() == str(identity.id):
        return
    raise Forbidden(message)


async def require_owner_or_admin(
    id: str,
    identity: Identity = Depends(require_auth),
) -> Identity:
    """Allow the user named by the ``{id}`` path parameter, or any admin."""
    ensure_owner_or_admin(identity, id)
    return identity


async def optional_auth(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> Identity | None:
    """Optionally authenticate the caller.

    Returns ``None`` instead of raising when the token is missing or invalid.
    Used by public routes that personalise output for logged-in users.
    """
    try:
        identity = await require_auth(request, credentials)
    except (Unauthenticated, InvalidToken):
        request.state.identity = None
        return None
    return identity


async def get_current_user(
    identity: Identity = Depends(require_auth),
    session: AsyncSession = Depends(get_db),
) -> User:
    """Load the authenticated caller's ``User`` row.

    Raises:
        NotFound: The token is valid but the account has since been deleted.
    """
    user = await session.get(User, identity.id)
    if user is None:
        raise NotFound("User not found")
    return user
