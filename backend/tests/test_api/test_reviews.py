"""Tests for tour review endpoints and the rating rollup."""

import uuid

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import bearer, make_user
from travelworld.models.tour import Tour
from travelworld.models.user import User


async def _review(client: AsyncClient, tour: Tour, headers: dict, rating: int, text: str = "Lovely trip"):
    return await client.post(
        f"/api/v1/reviews/tour/{tour.id}",
        json={"reviewText": text, "rating": rating},
        headers=headers,
    )


class TestCreateReview:
    async def test_create_review(self, client: AsyncClient, test_tour: Tour, test_user: User, auth_headers: dict):
        response = await _review(client, test_tour, auth_headers, 4)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["username"] == test_user.username
        assert data["userId"] == str(test_user.id)
        assert data["rating"] == 4

    async def test_second_review_is_duplicate(self, client: AsyncClient, test_tour: Tour, auth_headers: dict):
        await _review(client, test_tour, auth_headers, 4)
        response = await _review(client, test_tour, auth_headers, 5)
        assert response.status_code == 400
        assert response.json()["error"] == "duplicate_key"

    async def test_rating_rollup(
        self,
        client: AsyncClient,
        test_tour: Tour,
        auth_headers: dict,
        other_headers: dict,
    ):
        await _review(client, test_tour, auth_headers, 4)
        await _review(client, test_tour, other_headers, 5)

        tour = (await client.get(f"/api/v1/tours/{test_tour.id}")).json()["data"]
        assert tour["ratingsAverage"] == 4.5
        assert tour["ratingsQuantity"] == 2
        assert len(tour["reviews"]) == 2

    async def test_rollup_rounds_to_one_decimal(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        test_tour: Tour,
    ):
        for rating in (5, 4, 4):
            user = await make_user(db_session, "rater")
            await _review(client, test_tour, bearer(user), rating)
        tour = (await client.get(f"/api/v1/tours/{test_tour.id}")).json()["data"]
        assert tour["ratingsAverage"] == 4.3
        assert tour["ratingsQuantity"] == 3

    async def test_rating_out_of_range(self, client: AsyncClient, test_tour: Tour, auth_headers: dict):
        response = await _review(client, test_tour, auth_headers, 6)
        assert response.status_code == 400

    async def test_blank_text_rejected(self, client: AsyncClient, test_tour: Tour, auth_headers: dict):
        response = await _review(client, test_tour, auth_headers, 3, text="   ")
        assert response.status_code == 400

    async def test_requires_auth(self, client: AsyncClient, test_tour: Tour):
        response = await _review(client, test_tour, {}, 4)
        assert response.status_code == 401

    async def test_unknown_tour(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            f"/api/v1/reviews/tour/{uuid.uuid4()}",
            json={"reviewText": "Where am I", "rating": 3},
            headers=auth_headers,
        )
        assert response.status_code == 404


class TestListReviews:
    async def test_list_with_statistics(
        self,
        client: AsyncClient,
        test_tour: Tour,
        auth_headers: dict,
        other_headers: dict,
    ):
        await _review(client, test_tour, auth_headers, 2)
        await _review(client, test_tour, other_headers, 4)

        response = await client.get(f"/api/v1/reviews/tour/{test_tour.id}?page=1&limit=1")
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["reviews"]) == 1
        assert data["reviews"][0]["rating"] == 4
        assert data["pagination"]["total"] == 2
        assert data["pagination"]["hasNext"] is True
        stats = data["statistics"]
        assert stats["averageRating"] == 3.0
        assert stats["totalReviews"] == 2
        assert stats["ratingDistribution"] == {"1": 0, "2": 1, "3": 0, "4": 1, "5": 0}


class TestDeleteReview:
    async def test_owner_deletes_and_rating_recomputes(
        self,
        client: AsyncClient,
        test_tour: Tour,
        auth_headers: dict,
        other_headers: dict,
    ):
        mine = (await _review(client, test_tour, auth_headers, 1)).json()["data"]
        await _review(client, test_tour, other_headers, 5)

        response = await client.delete(f"/api/v1/reviews/{mine['id']}", headers=auth_headers)
        assert response.status_code == 200

        tour = (await client.get(f"/api/v1/tours/{test_tour.id}")).json()["data"]
        assert tour["ratingsAverage"] == 5.0
        assert tour["ratingsQuantity"] == 1

    async def test_stranger_forbidden(
        self,
        client: AsyncClient,
        test_tour: Tour,
        auth_headers: dict,
        other_headers: dict,
    ):
        mine = (await _review(client, test_tour, auth_headers, 3)).json()["data"]
        response = await client.delete(f"/api/v1/reviews/{mine['id']}", headers=other_headers)
        assert response.status_code == 403

    async def test_admin_may_delete(
        self,
        client: AsyncClient,
        test_tour: Tour,
        auth_headers: dict,
        admin_headers: dict,
    ):
        mine = (await _review(client, test_tour, auth_headers, 3)).json()["data"]
        response = await client.delete(f"/api/v1/reviews/{mine['id']}", headers=admin_headers)
        assert response.status_code == 200

        tour = (await client.get(f"/api/v1/tours/{test_tour.id}")).json()["data"]
        assert tour["ratingsAverage"] == 0
        assert tour["ratingsQuantity"] == 0
