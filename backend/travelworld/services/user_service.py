"""User service — the credential store and user CRUD.

Usernames and emails are unique case-insensitively. Uniqueness is checked
up front so the caller learns which field collided, and again by the
``lower()`` unique indexes for concurrent registrations.
"""

import logging
import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.auth.passwords import hash_password_async, verify_password_async
from travelworld.errors import DuplicateKey, InvalidCredentials, NotFound, ValidationError
from travelworld.models.experience import ExperienceLike
from travelworld.models.review import Review
from travelworld.models.user import ROLE_USER, User
from travelworld.schemas.auth import RegisterRequest
from travelworld.schemas.common import PageParams
from travelworld.schemas.user import UserCreate, UserUpdate
from travelworld.services.aggregation import recompute_tour_rating, recount_likes
from travelworld.services.common import get_or_404, violated_constraint

logger = logging.getLogger(__name__)

_USERNAME_INDEX = "uq_users_username_lower"
_EMAIL_INDEX = "uq_users_email_lower"


def _duplicate(field: str) -> DuplicateKey:
    if field == "email":
        return DuplicateKey("Email already registered", field="email")
    return DuplicateKey("Username already taken", field="username")


async def find_by_identifier(session: AsyncSession, identifier: str) -> User | None:
    """Look a user up by email OR username, ignoring case."""
    needle = identifier.strip().lower()
    result = await session.execute(
        select(User).where(or_(func.lower(User.email) == needle, func.lower(User.username) == needle))
    )
    return result.scalars().first()


async def _ensure_unique(
    session: AsyncSession,
    username: str | None,
    email: str | None,
    exclude_id: uuid.UUID | None = None,
) -> None:
    """Raise ``DuplicateKey`` naming the colliding field."""
    checks = []
    if email is not None:
        checks.append(("email", func.lower(User.email) == email.lower()))
    if username is not None:
        checks.append(("username", func.lower(User.username) == username.lower()))

    for field, condition in checks:
        query = select(User.id).where(condition)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if (await session.execute(query.limit(1))).first() is not None:
            raise _duplicate(field)


async def _flush_user(session: AsyncSession, user: User) -> User:
    """Persist a new or modified user, translating index violations."""
    try:
        async with session.begin_nested():
            session.add(user)
            await session.flush()
    except IntegrityError as exc:
        constraint = violated_constraint(exc, _EMAIL_INDEX, _USERNAME_INDEX)
        if constraint == _EMAIL_INDEX:
            raise _duplicate("email") from None
        if constraint == _USERNAME_INDEX:
            raise _duplicate("username") from None
        raise
    await session.refresh(user)
    return user


async def _create(
    session: AsyncSession,
    username: str,
    email: str,
    password: str,
    photo: str | None,
    role: str,
) -> User:
    await _ensure_unique(session, username, email)
    user = User(
        username=username,
        email=email.lower(),
        hashed_password=await hash_password_async(password),
        photo=photo,
        role=role,
    )
    return await _flush_user(session, user)


async def register_user(session: AsyncSession, body: RegisterRequest) -> User:
    """Register a self-service account. Always created with the ``user`` role."""
    user = await _create(session, body.username, str(body.email), body.password, body.photo, ROLE_USER)
    logger.info("Registered user %s (%s)", user.id, user.username)
    return user


async def create_user(session: AsyncSession, body: UserCreate) -> User:
    """Create an account on behalf of an admin, who may choose the role."""
    user = await _create(session, body.username, str(body.email), body.password, body.photo, body.role)
    logger.info("Admin created user %s with role %s", user.id, user.role)
    return user


async def authenticate(session: AsyncSession, identifier: str, password: str) -> User:
    """Check credentials for an email-or-username identifier.

    Raises:
        NotFound: No user matches the identifier.
        InvalidCredentials: The password does not match the stored hash.
    """
    user = await find_by_identifier(session, identifier)
    if user is None:
        logger.info("Login failed: no user for identifier")
        raise NotFound("User not found")

    if not await verify_password_async(password, user.hashed_password):
        logger.warning("Login failed: wrong password for user %s", user.id)
        raise InvalidCredentials()

    logger.info("User %s logged in", user.id)
    return user


async def change_password(session: AsyncSession, user: User, current_password: str, new_password: str) -> None:
    """Replace a user's password after verifying the current one."""
    if not await verify_password_async(current_password, user.hashed_password):
        raise ValidationError.from_fields(
            [{"field": "currentPassword", "message": "Current password is incorrect"}],
            message="Current password is incorrect",
        )
    user.hashed_password = await hash_password_async(new_password)
    await _flush_user(session, user)
    logger.info("User %s changed password", user.id)


async def get_user(session: AsyncSession, raw_id: uuid.UUID | str) -> User:
    return await get_or_404(session, User, raw_id, "User")


async def list_users(session: AsyncSession, page: PageParams) -> tuple[list[User], int]:
    """Return one page of users, newest first, plus the total count."""
    total = (await session.execute(select(func.count()).select_from(User))).scalar_one()
    result = await session.execute(
        select(User).order_by(User.created_at.desc()).offset(page.skip).limit(page.limit)
    )
    return list(result.scalars().all()), total


async def update_user(session: AsyncSession, raw_id: uuid.UUID | str, body: UserUpdate) -> User:
    """Partially update a profile.

    ``password`` and ``role`` are always stripped: role changes and password
    resets never go through the generic update path.
    """
    user = await get_user(session, raw_id)
    update_data = body.model_dump(exclude_unset=True, exclude={"password", "role"})
    if not update_data:
        return user

    await _ensure_unique(session, update_data.get("username"), update_data.get("email"), exclude_id=user.id)
    if "email" in update_data and update_data["email"] is not None:
        update_data["email"] = str(update_data["email"]).lower()

    for field, value in update_data.items():
        if value is None and field in ("username", "email"):
            continue
        setattr(user, field, value)

    user = await _flush_user(session, user)
    logger.info("Updated user %s fields %s", user.id, sorted(update_data))
    return user


async def delete_user(session: AsyncSession, raw_id: uuid.UUID | str) -> User:
    """Delete a user with their reviews, bookings and likes, then refresh affected rollups."""
    user = await get_user(session, raw_id)
    reviewed_tours = (
        await session.scalars(select(Review.tour_id).where(Review.user_id == user.id).distinct())
    ).all()
    liked_experiences = (
        await session.scalars(select(ExperienceLike.experience_id).where(ExperienceLike.user_id == user.id))
    ).all()

    await session.delete(user)
    await session.flush()

    await recount_likes(session, liked_experiences)
    for tour_id in reviewed_tours:
        await recompute_tour_rating(session, tour_id)

    logger.info("Deleted user %s", user.id)
    return user
