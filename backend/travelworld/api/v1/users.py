"""Users API router.

Listing and creation are admin-only. Single-user routes are open to the
user named in the path and to admins.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.api.deps import get_db, page_params, require_admin, require_owner_or_admin
from travelworld.auth.jwt import Identity
from travelworld.config import settings
from travelworld.schemas.common import Envelope, ListEnvelope, PageParams
from travelworld.schemas.user import UserCreate, UserResponse, UserUpdate
from travelworld.services import user_service

router = APIRouter(prefix=f"{settings.api_prefix}/users", tags=["users"])


@router.post(
    "",
    response_model=Envelope[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a user (admin)",
)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> Envelope[UserResponse]:
    user = await user_service.create_user(db, body)
    return Envelope[UserResponse](message="Successfully created", data=UserResponse.model_validate(user))


@router.get("", response_model=ListEnvelope[UserResponse], summary="List users (admin)")
async def list_users(
    page: PageParams = Depends(page_params(10)),
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> ListEnvelope[UserResponse]:
    users, total = await user_service.list_users(db, page)
    return ListEnvelope[UserResponse](
        count=len(users),
        data=[UserResponse.model_validate(u) for u in users],
        pagination=page.pagination(total),
    )


@router.get("/{id}", response_model=Envelope[UserResponse], summary="Get a user")
async def get_user(
    id: str,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_owner_or_admin),
) -> Envelope[UserResponse]:
    user = await user_service.get_user(db, id)
    return Envelope[UserResponse](data=UserResponse.model_validate(user))


@router.put("/{id}", response_model=Envelope[UserResponse], summary="Update a user")
async def update_user(
    id: str,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_owner_or_admin),
) -> Envelope[UserResponse]:
    """Partially update a profile. ``password`` and ``role`` are ignored."""
    user = await user_service.update_user(db, id, body)
    return Envelope[UserResponse](message="Successfully updated", data=UserResponse.model_validate(user))


@router.delete("/{id}", response_model=Envelope[UserResponse], summary="Delete a user")
async def delete_user(
    id: str,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_owner_or_admin),
) -> Envelope[UserResponse]:
    user = await user_service.delete_user(db, id)
    return Envelope[UserResponse](message="Successfully deleted", data=UserResponse.model_validate(user))
