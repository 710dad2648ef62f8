"""Tours API router.

Reading and searching the catalogue is public; changes are admin-only.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from travelworld.api.deps import get_db, page_params, require_admin
from travelworld.auth.jwt import Identity
from travelworld.config import settings
from travelworld.schemas.common import Envelope, ListEnvelope, PageParams
from travelworld.schemas.tour import TourCreate, TourDetailResponse, TourLocation, TourResponse, TourUpdate
from travelworld.services import tour_service

router = APIRouter(prefix=f"{settings.api_prefix}/tours", tags=["tours"])


@router.post(
    "",
    response_model=Envelope[TourResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a tour (admin)",
)
async def create_tour(
    body: TourCreate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> Envelope[TourResponse]:
    tour = await tour_service.create_tour(db, body)
    return Envelope[TourResponse](message="Successfully created", data=TourResponse.model_validate(tour))


@router.get("", response_model=ListEnvelope[TourResponse], summary="List tours")
async def list_tours(
    page: PageParams = Depends(page_params(9)),
    db: AsyncSession = Depends(get_db),
) -> ListEnvelope[TourResponse]:
    tours, total = await tour_service.list_tours(db, page)
    return ListEnvelope[TourResponse](
        count=len(tours),
        data=[TourResponse.model_validate(t) for t in tours],
        pagination=page.pagination(total),
    )


# ---------------------------------------------------------------------------
# Search routes (registered before /{id} so the literal segments win)
# ---------------------------------------------------------------------------


@router.get("/search/getTourBySearch", response_model=Envelope[list[TourResponse]])
async def search_tours(
    city: str | None = Query(None, description="Case-insensitive substring of the city"),
    distance: float | None = Query(None, ge=0, description="Minimum distance in km"),
    max_people: int | None = Query(None, alias="maxPeople", ge=1, description="Minimum group size"),
    db: AsyncSession = Depends(get_db),
) -> Envelope[list[TourResponse]]:
    tours = await tour_service.search_tours(db, city=city, min_distance=distance, min_group_size=max_people)
    return Envelope[list[TourResponse]](data=[TourResponse.model_validate(t) for t in tours])


@router.get("/search/getFeaturedTours", response_model=Envelope[list[TourResponse]])
async def featured_tours(
    limit: int = Query(8, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> Envelope[list[TourResponse]]:
    tours = await tour_service.featured_tours(db, limit)
    return Envelope[list[TourResponse]](data=[TourResponse.model_validate(t) for t in tours])


@router.get("/search/getTourCount", response_model=Envelope[int])
async def tour_count(db: AsyncSession = Depends(get_db)) -> Envelope[int]:
    return Envelope[int](data=await tour_service.count_tours(db))


@router.get("/search/locations", response_model=Envelope[list[TourLocation]], summary="Tours with map coordinates")
async def tour_locations(db: AsyncSession = Depends(get_db)) -> Envelope[list[TourLocation]]:
    """Every tour that can be placed on the map, with its rating rollup."""
    tours = await tour_service.tour_locations(db)
    return Envelope[list[TourLocation]](data=[TourLocation.model_validate(t) for t in tours])


# ---------------------------------------------------------------------------
# Single tour
# ---------------------------------------------------------------------------


@router.get("/{id}", response_model=Envelope[TourDetailResponse], summary="Get a tour with its reviews")
async def get_tour(id: str, db: AsyncSession = Depends(get_db)) -> Envelope[TourDetailResponse]:
    tour = await tour_service.get_tour(db, id)
    return Envelope[TourDetailResponse](data=TourDetailResponse.model_validate(tour))


@router.put("/{id}", response_model=Envelope[TourResponse], summary="Update a tour (admin)")
async def update_tour(
    id: str,
    body: TourUpdate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> Envelope[TourResponse]:
    tour = await tour_service.update_tour(db, id, body)
    return Envelope[TourResponse](message="Successfully updated", data=TourResponse.model_validate(tour))


@router.delete("/{id}", response_model=Envelope[TourResponse], summary="Delete a tour (admin)")
async def delete_tour(
    id: str,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> Envelope[TourResponse]:
    tour = await tour_service.delete_tour(db, id)
    return Envelope[TourResponse](message="Successfully deleted", data=TourResponse.model_validate(tour))
