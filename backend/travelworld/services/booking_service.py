"""Booking service — reservations with a server-side price snapshot."""

import logging
import uuid
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.auth.jwt import Identity
from travelworld.errors import NotFound, ValidationError
from travelworld.models.booking import Booking
from travelworld.models.tour import Tour
from travelworld.models.user import User
from travelworld.schemas.booking import BookingCreate
from travelworld.schemas.common import PageParams
from travelworld.services.common import get_or_404, parse_object_id

logger = logging.getLogger(__name__)


async def create_booking(session: AsyncSession, body: BookingCreate, identity: Identity) -> Booking:
    """Book a tour for the caller.

    The tour name and total price are copied from the tour at booking time so
    later catalogue edits do not rewrite past bookings.
    """
    tour = await session.get(Tour, body.tour_id)
    if tour is None:
        raise NotFound("Tour not found")

    user = await session.get(User, identity.id)
    if user is None:
        raise NotFound("User not found")

    if body.guest_size > tour.max_group_size:
        raise ValidationError.from_fields(
            [
                {
                    "field": "guestSize",
                    "message": f"Group size cannot exceed {tour.max_group_size} for this tour",
                }
            ]
        )

    booking = Booking(
        user_id=user.id,
        user_email=user.email,
        tour_id=tour.id,
        tour_name=tour.title,
        full_name=body.full_name,
        phone=body.phone,
        guest_size=body.guest_size,
        book_at=body.book_at,
        total_price=Decimal(tour.price) * body.guest_size,
    )
    session.add(booking)
    await session.flush()
    await session.refresh(booking)

    logger.info("User %s booked tour %s for %d guests", user.id, tour.id, booking.guest_size)
    return booking


async def get_booking(session: AsyncSession, raw_id: uuid.UUID | str) -> Booking:
    return await get_or_404(session, Booking, raw_id, "Booking")


async def list_bookings(
    session: AsyncSession,
    page: PageParams,
    user_id: uuid.UUID | str | None = None,
) -> tuple[list[Booking], int]:
    """Return one page of bookings, newest first; optionally only one user's."""
    filters = []
    if user_id is not None:
        filters.append(Booking.user_id == parse_object_id(user_id, "user"))

    total = (await session.execute(select(func.count()).select_from(Booking).where(*filters))).scalar_one()
    result = await session.execute(
        select(Booking).where(*filters).order_by(Booking.created_at.desc()).offset(page.skip).limit(page.limit)
    )
    return list(result.scalars().all()), total
