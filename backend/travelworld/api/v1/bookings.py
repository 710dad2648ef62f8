"""Bookings API router.

Any logged-in user may book. A booking is visible to the user who made it and
to admins; the full list is admin-only.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.api.deps import (
    ensure_owner_or_admin,
    get_db,
    page_params,
    require_admin,
    require_auth,
    require_owner_or_admin,
)
from travelworld.auth.jwt import Identity
from travelworld.config import settings
from travelworld.schemas.booking import BookingCreate, BookingResponse
from travelworld.schemas.common import Envelope, ListEnvelope, PageParams
from travelworld.services import booking_service

router = APIRouter(prefix=f"{settings.api_prefix}/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=Envelope[BookingResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Book a tour",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_auth),
) -> Envelope[BookingResponse]:
    booking = await booking_service.create_booking(db, body, identity)
    return Envelope[BookingResponse](message="Your tour is booked", data=BookingResponse.model_validate(booking))


@router.get("", response_model=ListEnvelope[BookingResponse], summary="List all bookings (admin)")
async def list_bookings(
    page: PageParams = Depends(page_params(10)),
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> ListEnvelope[BookingResponse]:
    bookings, total = await booking_service.list_bookings(db, page)
    return ListEnvelope[BookingResponse](
        count=len(bookings),
        data=[BookingResponse.model_validate(b) for b in bookings],
        pagination=page.pagination(total),
    )


@router.get(
    "/user/{id}",
    response_model=ListEnvelope[BookingResponse],
    summary="List one user's bookings",
)
async def list_user_bookings(
    id: str,
    page: PageParams = Depends(page_params(10)),
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_owner_or_admin),
) -> ListEnvelope[BookingResponse]:
    bookings, total = await booking_service.list_bookings(db, page, user_id=id)
    return ListEnvelope[BookingResponse](
        count=len(bookings),
        data=[BookingResponse.model_validate(b) for b in bookings],
        pagination=page.pagination(total),
    )


@router.get("/{id}", response_model=Envelope[BookingResponse], summary="Get a booking")
async def get_booking(
    id: str,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_auth),
) -> Envelope[BookingResponse]:
    """Ownership is checked against the booking's user, not the path id."""
    booking = await booking_service.get_booking(db, id)
    ensure_owner_or_admin(identity, booking.user_id, "Access denied. You can only view your own bookings.")
    return Envelope[BookingResponse](data=BookingResponse.model_validate(booking))
