"""Experiences API router.

Experiences are created from multipart forms carrying up to ten images.
List-valued fields (``categories``, ``itinerary``, ``tags``, ``coordinates``)
arrive JSON-encoded inside the form. A plain JSON body is accepted as well.

Published experiences are public and personalised with ``isLiked`` when a token
is present; drafts are visible only to their author and admins.
Changes require the author or an admin; liking requires a login.
"""

import json
from typing import Any

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from travelworld.api.deps import (
    ensure_owner_or_admin,
    get_db,
    get_image_store,
    optional_auth,
    page_params,
    require_auth,
)
from travelworld.auth.jwt import Identity
from travelworld.config import settings
from travelworld.errors import ValidationError
from travelworld.models.experience import Experience, is_liked_by
from travelworld.schemas.common import Envelope, ListEnvelope, PageParams
from travelworld.schemas.experience import (
    ExperienceCreate,
    ExperienceResponse,
    ExperienceStats,
    ExperienceSummary,
    ExperienceUpdate,
    LikeResult,
)
from travelworld.services import experience_service
from travelworld.services.experience_service import ExperienceFilter
from travelworld.services.storage import LocalImageStore

router = APIRouter(prefix=f"{settings.api_prefix}/experiences", tags=["experiences"])

_JSON_FIELDS = {"categories", "itinerary", "tags", "coordinates", "images"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _decode_json_field(name: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError.from_fields(
            [{"field": name, "message": f"Invalid format for {name}"}],
            message=f"Invalid format for {name}",
        ) from None


async def _read_submission(request: Request) -> tuple[dict[str, Any], list[UploadFile]]:
    """Split a form (or JSON) submission into field values and uploaded files."""
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            payload = await request.json()
        except json.JSONDecodeError:
            raise ValidationError("Invalid JSON body") from None
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be an object")
        return payload, []

    form = await request.form()
    data: dict[str, Any] = {}
    files: list[UploadFile] = []
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key == "images":
                files.append(value)
            continue
        if value == "":
            continue
        data[key] = _decode_json_field(key, value) if key in _JSON_FIELDS else value
    return data, files


def _validate(schema, data: dict[str, Any]):
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc.errors()) from None


def _summary(experience: Experience, identity: Identity | None) -> ExperienceSummary:
    item = ExperienceSummary.model_validate(experience)
    item.is_liked = is_liked_by(experience, identity.id if identity else None)
    return item


def _detail(experience: Experience, identity: Identity | None) -> ExperienceResponse:
    item = ExperienceResponse.model_validate(experience)
    item.is_liked = is_liked_by(experience, identity.id if identity else None)
    return item


async def _discard(store: LocalImageStore, urls: list[str]) -> None:
    for url in urls:
        await store.delete(url)


def _ensure_author_or_admin(identity: Identity, experience: Experience, action: str) -> None:
    ensure_owner_or_admin(
        identity,
        experience.author_id,
        f"Access denied. You can only {action} your own experiences.",
    )


def _listing(
    items: list[Experience],
    total: int,
    page: PageParams,
    identity: Identity | None = None,
) -> ListEnvelope[ExperienceSummary]:
    return ListEnvelope[ExperienceSummary](
        count=len(items),
        data=[_summary(e, identity) for e in items],
        pagination=page.pagination(total),
    )


# ---------------------------------------------------------------------------
# Collection routes
# ---------------------------------------------------------------------------


@router.get("", response_model=ListEnvelope[ExperienceSummary], summary="List published experiences")
async def list_experiences(
    category: str | None = Query(None),
    budget_range: str | None = Query(None, alias="budgetRange"),
    destination: str | None = Query(None),
    search: str | None = Query(None, max_length=200),
    sort_by: str | None = Query(None, alias="sortBy", description="newest, oldest, popular or views"),
    page: PageParams = Depends(page_params(12)),
    db: AsyncSession = Depends(get_db),
    identity: Identity | None = Depends(optional_auth),
) -> ListEnvelope[ExperienceSummary]:
    filters = ExperienceFilter(
        category=category,
        budget_range=budget_range,
        destination=destination,
        search=search,
    )
    items, total = await experience_service.list_experiences(db, filters, sort_by, page)
    return _listing(items, total, page, identity)


@router.post(
    "",
    response_model=Envelope[ExperienceResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Share an experience",
)
async def create_experience(
    request: Request,
    db: AsyncSession = Depends(get_db),
    store: LocalImageStore = Depends(get_image_store),
    identity: Identity | None = Depends(optional_auth),
) -> Envelope[ExperienceResponse]:
    """Create an experience from a multipart form with optional ``images`` files."""
    data, files = await _read_submission(request)
    data.pop("images", None)
    body = _validate(ExperienceCreate, data)

    image_urls = await store.save_all(files)
    try:
        experience = await experience_service.create_experience(db, body, image_urls, identity)
        await db.commit()
    except Exception:
        await _discard(store, image_urls)
        raise
    return Envelope[ExperienceResponse](
        message="Experience created successfully",
        data=_detail(experience, identity),
    )


@router.get("/stats", response_model=Envelope[ExperienceStats], summary="Experience statistics")
async def experience_stats(db: AsyncSession = Depends(get_db)) -> Envelope[ExperienceStats]:
    stats = await experience_service.experience_stats(db)
    return Envelope[ExperienceStats](data=ExperienceStats(**stats))


@router.get("/search/suggestions", response_model=Envelope[list[str]], summary="Search suggestions")
async def search_suggestions(
    q: str = Query("", max_length=100),
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
) -> Envelope[list[str]]:
    return Envelope[list[str]](data=await experience_service.search_suggestions(db, q, limit))


@router.get("/featured/popular", response_model=Envelope[list[ExperienceSummary]])
async def popular_experiences(
    limit: int = Query(6, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
) -> Envelope[list[ExperienceSummary]]:
    items = await experience_service.popular_experiences(db, limit)
    return Envelope[list[ExperienceSummary]](data=[_summary(e, None) for e in items])


@router.get("/featured/recent", response_model=Envelope[list[ExperienceSummary]])
async def recent_experiences(
    limit: int = Query(6, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
) -> Envelope[list[ExperienceSummary]]:
    items = await experience_service.recent_experiences(db, limit)
    return Envelope[list[ExperienceSummary]](data=[_summary(e, None) for e in items])


@router.get("/category/{category}", response_model=ListEnvelope[ExperienceSummary])
async def experiences_by_category(
    category: str,
    sort_by: str | None = Query(None, alias="sortBy"),
    page: PageParams = Depends(page_params(12)),
    db: AsyncSession = Depends(get_db),
) -> ListEnvelope[ExperienceSummary]:
    items, total = await experience_service.list_experiences(
        db, ExperienceFilter(category=category), sort_by, page
    )
    return _listing(items, total, page)


@router.get("/destination/{destination}", response_model=ListEnvelope[ExperienceSummary])
async def experiences_by_destination(
    destination: str,
    sort_by: str | None = Query(None, alias="sortBy"),
    page: PageParams = Depends(page_params(12)),
    db: AsyncSession = Depends(get_db),
) -> ListEnvelope[ExperienceSummary]:
    items, total = await experience_service.list_experiences(
        db, ExperienceFilter(destination=destination), sort_by, page
    )
    return _listing(items, total, page)


# ---------------------------------------------------------------------------
# Single experience
# ---------------------------------------------------------------------------


@router.get("/{id}", response_model=Envelope[ExperienceResponse], summary="Get an experience")
async def get_experience(
    id: str,
    db: AsyncSession = Depends(get_db),
    identity: Identity | None = Depends(optional_auth),
) -> Envelope[ExperienceResponse]:
    """Return one experience and count the view."""
    experience = await experience_service.view_experience(db, id, identity)
    return Envelope[ExperienceResponse](data=_detail(experience, identity))


@router.put("/{id}", response_model=Envelope[ExperienceResponse], summary="Update an experience")
async def update_experience(
    id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    store: LocalImageStore = Depends(get_image_store),
    identity: Identity = Depends(require_auth),
) -> Envelope[ExperienceResponse]:
    """Partially update an experience. Uploaded ``images`` files are appended."""
    experience = await experience_service.get_experience(db, id)
    _ensure_author_or_admin(identity, experience, "update")

    data, files = await _read_submission(request)
    body = _validate(ExperienceUpdate, data)

    previous_images = list(experience.images)
    new_images = await store.save_all(files)
    try:
        experience = await experience_service.update_experience(db, experience, body, new_images)
        await db.commit()
    except Exception:
        await _discard(store, new_images)
        raise

    await _discard(store, [url for url in previous_images if url not in experience.images])
    return Envelope[ExperienceResponse](
        message="Experience updated successfully",
        data=_detail(experience, identity),
    )


@router.delete("/{id}", response_model=Envelope[ExperienceResponse], summary="Delete an experience")
async def delete_experience(
    id: str,
    db: AsyncSession = Depends(get_db),
    store: LocalImageStore = Depends(get_image_store),
    identity: Identity = Depends(require_auth),
) -> Envelope[ExperienceResponse]:
    experience = await experience_service.get_experience(db, id)
    _ensure_author_or_admin(identity, experience, "delete")

    deleted = _detail(experience, identity)
    await experience_service.delete_experience(db, experience)
    # files go only once the row is gone for good
    await db.commit()
    await _discard(store, deleted.images)
    return Envelope[ExperienceResponse](message="Experience deleted successfully", data=deleted)


@router.post("/{id}/like", response_model=Envelope[LikeResult], summary="Like or unlike an experience")
async def like_experience(
    id: str,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_auth),
) -> Envelope[LikeResult]:
    """Toggle the caller's like; the second call undoes the first."""
    experience, liked = await experience_service.like_experience(db, id, identity)
    return Envelope[LikeResult](
        message="Experience liked" if liked else "Experience unliked",
        data=LikeResult(liked=liked, likes=experience.likes, liked_by=experience.liked_by),
    )
