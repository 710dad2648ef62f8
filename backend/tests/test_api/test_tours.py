"""Tests for tour catalogue endpoints."""

import uuid

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import make_tour
from travelworld.models.tour import Tour


def _tour_body(**overrides) -> dict:
    body = {
        "title": f"Tour {uuid.uuid4().hex[:8]}",
        "city": "London",
        "address": "Westminster Bridge Rd",
        "distance": 300,
        "desc": "Walk across the Thames.",
        "price": 99,
        "maxGroupSize": 10,
        "featured": True,
    }
    body.update(overrides)
    return body


class TestCreateTour:
    async def test_admin_creates_tour(self, client: AsyncClient, admin_headers: dict):
        response = await client.post("/api/v1/tours", json=_tour_body(), headers=admin_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["maxGroupSize"] == 10
        assert data["ratingsAverage"] == 0
        assert data["ratingsQuantity"] == 0

    async def test_user_forbidden(self, client: AsyncClient, auth_headers: dict):
        response = await client.post("/api/v1/tours", json=_tour_body(), headers=auth_headers)
        assert response.status_code == 403

    async def test_anonymous_unauthenticated(self, client: AsyncClient):
        response = await client.post("/api/v1/tours", json=_tour_body())
        assert response.status_code == 401

    async def test_duplicate_title(self, client: AsyncClient, test_tour: Tour, admin_headers: dict):
        response = await client.post("/api/v1/tours", json=_tour_body(title=test_tour.title), headers=admin_headers)
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "duplicate_key"
        assert body["field"] == "title"

    async def test_unknown_field_rejected(self, client: AsyncClient, admin_headers: dict):
        response = await client.post(
            "/api/v1/tours",
            json=_tour_body(ratingsAverage=5),
            headers=admin_headers,
        )
        assert response.status_code == 400

    async def test_every_violation_reported(self, client: AsyncClient, admin_headers: dict):
        response = await client.post(
            "/api/v1/tours",
            json=_tour_body(distance=-1, maxGroupSize=0, price=-5),
            headers=admin_headers,
        )
        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert {"distance", "maxGroupSize", "price"} <= fields


class TestReadTours:
    async def test_list_paginates_from_page_one(self, client: AsyncClient, db_session: AsyncSession):
        for _ in range(3):
            await make_tour(db_session)
        response = await client.get("/api/v1/tours?page=1&limit=2")
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert body["pagination"]["currentPage"] == 1
        assert body["pagination"]["hasNext"] is True

    async def test_default_limit(self, client: AsyncClient):
        response = await client.get("/api/v1/tours")
        assert response.json()["pagination"]["limit"] == 9

    async def test_get_by_id_includes_reviews(self, client: AsyncClient, test_tour: Tour):
        response = await client.get(f"/api/v1/tours/{test_tour.id}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == test_tour.title
        assert data["reviews"] == []

    async def test_invalid_id(self, client: AsyncClient):
        response = await client.get("/api/v1/tours/12345")
        assert response.status_code == 400
        assert response.json()["success"] is False

    async def test_not_found(self, client: AsyncClient):
        response = await client.get(f"/api/v1/tours/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["message"] == "Tour not found"


class TestSearchTours:
    async def test_city_distance_and_group_size(self, client: AsyncClient, db_session: AsyncSession):
        city = f"Kyoto{uuid.uuid4().hex[:6]}"
        near = await make_tour(db_session, city=city, distance=50, max_group_size=4)
        far = await make_tour(db_session, city=city, distance=500, max_group_size=12)

        response = await client.get(
            "/api/v1/tours/search/getTourBySearch",
            params={"city": city.lower(), "distance": 100, "maxPeople": 10},
        )
        assert response.status_code == 200
        ids = [t["id"] for t in response.json()["data"]]
        assert ids == [str(far.id)]
        assert str(near.id) not in ids

    async def test_featured(self, client: AsyncClient, db_session: AsyncSession):
        featured = await make_tour(db_session, featured=True)
        plain = await make_tour(db_session, featured=False)
        response = await client.get("/api/v1/tours/search/getFeaturedTours?limit=50")
        ids = {t["id"] for t in response.json()["data"]}
        assert str(featured.id) in ids
        assert str(plain.id) not in ids

    async def test_count(self, client: AsyncClient, db_session: AsyncSession):
        before = (await client.get("/api/v1/tours/search/getTourCount")).json()["data"]
        await make_tour(db_session)
        after = (await client.get("/api/v1/tours/search/getTourCount")).json()["data"]
        assert after == before + 1

    async def test_locations_only_tours_with_coordinates(self, client: AsyncClient, db_session: AsyncSession):
        mapped = await make_tour(db_session, lat=-8.5069, lng=115.2625, ratings_average=4.5, ratings_quantity=2)
        unmapped = await make_tour(db_session, lat=None, lng=None)
        half = await make_tour(db_session, lat=10.0, lng=None)

        response = await client.get("/api/v1/tours/search/locations")
        assert response.status_code == 200
        by_id = {t["id"]: t for t in response.json()["data"]}
        assert str(unmapped.id) not in by_id
        assert str(half.id) not in by_id

        marker = by_id[str(mapped.id)]
        assert marker["position"] == {"lat": -8.5069, "lng": 115.2625}
        assert marker["ratingsAverage"] == 4.5
        assert marker["ratingsQuantity"] == 2
        assert marker["title"] == mapped.title


class TestUpdateDeleteTour:
    async def test_partial_update(self, client: AsyncClient, test_tour: Tour, admin_headers: dict):
        response = await client.put(
            f"/api/v1/tours/{test_tour.id}",
            json={"price": 150, "featured": True},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["price"] == 150
        assert data["featured"] is True
        assert data["title"] == test_tour.title

    async def test_delete(self, client: AsyncClient, test_tour: Tour, admin_headers: dict):
        response = await client.delete(f"/api/v1/tours/{test_tour.id}", headers=admin_headers)
        assert response.status_code == 200
        missing = await client.get(f"/api/v1/tours/{test_tour.id}")
        assert missing.status_code == 404

    async def test_user_cannot_delete(self, client: AsyncClient, test_tour: Tour, auth_headers: dict):
        response = await client.delete(f"/api/v1/tours/{test_tour.id}", headers=auth_headers)
        assert response.status_code == 403
