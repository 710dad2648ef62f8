"""Tests for user management endpoints."""

import uuid

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import make_user
from travelworld.models.tour import Tour
from travelworld.models.user import User


class TestCreateUser:
    async def test_admin_can_create_admin(self, client: AsyncClient, admin_headers: dict):
        unique = uuid.uuid4().hex[:8]
        response = await client.post(
            "/api/v1/users",
            json={
                "username": f"ops_{unique}",
                "email": f"ops-{unique}@example.com",
                "password": "secret123",
                "role": "admin",
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["role"] == "admin"

    async def test_user_cannot_create(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            "/api/v1/users",
            json={"username": "sneaky", "email": "sneaky@example.com", "password": "secret123"},
            headers=auth_headers,
        )
        assert response.status_code == 403


class TestListUsers:
    async def test_pagination_is_one_indexed(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        admin_user: User,
        admin_headers: dict,
    ):
        for _ in range(4):
            await make_user(db_session, "pager")

        first = await client.get("/api/v1/users?page=1&limit=2", headers=admin_headers)
        second = await client.get("/api/v1/users?page=2&limit=2", headers=admin_headers)
        assert first.status_code == 200
        page_one = first.json()
        assert page_one["count"] == 2
        assert page_one["pagination"]["currentPage"] == 1
        assert page_one["pagination"]["total"] >= 5
        assert page_one["pagination"]["hasPrev"] is False

        ids_one = {u["id"] for u in page_one["data"]}
        ids_two = {u["id"] for u in second.json()["data"]}
        assert ids_one.isdisjoint(ids_two)

    async def test_page_zero_rejected(self, client: AsyncClient, admin_headers: dict):
        response = await client.get("/api/v1/users?page=0", headers=admin_headers)
        assert response.status_code == 400


class TestUpdateUser:
    async def test_update_own_profile(self, client: AsyncClient, test_user: User, auth_headers: dict):
        response = await client.put(
            f"/api/v1/users/{test_user.id}",
            json={"photo": "https://cdn.example.com/me.png"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["photo"] == "https://cdn.example.com/me.png"

    async def test_role_and_password_are_stripped(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        test_user: User,
        auth_headers: dict,
    ):
        old_hash = test_user.hashed_password
        response = await client.put(
            f"/api/v1/users/{test_user.id}",
            json={"role": "admin", "password": "hijacked!"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["role"] == "user"

        await db_session.refresh(test_user)
        assert test_user.role == "user"
        assert test_user.hashed_password == old_hash

    async def test_duplicate_username(
        self,
        client: AsyncClient,
        test_user: User,
        other_user: User,
        auth_headers: dict,
    ):
        response = await client.put(
            f"/api/v1/users/{test_user.id}",
            json={"username": other_user.username.upper()},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["field"] == "username"

    async def test_cannot_update_someone_else(self, client: AsyncClient, other_user: User, auth_headers: dict):
        response = await client.put(
            f"/api/v1/users/{other_user.id}",
            json={"photo": "x.png"},
            headers=auth_headers,
        )
        assert response.status_code == 403


class TestGetAndDeleteUser:
    async def test_invalid_id(self, client: AsyncClient, admin_headers: dict):
        response = await client.get("/api/v1/users/not-a-uuid", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid user ID format"

    async def test_missing_user(self, client: AsyncClient, admin_headers: dict):
        response = await client.get(f"/api/v1/users/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404

    async def test_delete_own_account(self, client: AsyncClient, test_user: User, auth_headers: dict, admin_headers: dict):
        response = await client.delete(f"/api/v1/users/{test_user.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(test_user.id)

        gone = await client.get(f"/api/v1/users/{test_user.id}", headers=admin_headers)
        assert gone.status_code == 404

    async def test_delete_refreshes_ratings_and_likes(
        self,
        client: AsyncClient,
        test_tour: Tour,
        test_user: User,
        other_user: User,
        auth_headers: dict,
        other_headers: dict,
    ):
        for headers, rating in ((auth_headers, 1), (other_headers, 5)):
            await client.post(
                f"/api/v1/reviews/tour/{test_tour.id}",
                json={"reviewText": "Worth it", "rating": rating},
                headers=headers,
            )
        experience = (
            await client.post(
                "/api/v1/experiences",
                json={
                    "title": "Night market crawl",
                    "destination": "Taipei",
                    "description": "Shilin after dark.",
                    "budgetRange": "budget",
                    "itinerary": [{"day": 1, "activities": "Eat everything"}],
                },
            )
        ).json()["data"]
        like_url = f"/api/v1/experiences/{experience['id']}/like"
        await client.post(like_url, headers=auth_headers)
        await client.post(like_url, headers=other_headers)

        response = await client.delete(f"/api/v1/users/{test_user.id}", headers=auth_headers)
        assert response.status_code == 200

        tour = (await client.get(f"/api/v1/tours/{test_tour.id}")).json()["data"]
        assert tour["ratingsAverage"] == 5.0
        assert tour["ratingsQuantity"] == 1
        assert [r["userId"] for r in tour["reviews"]] == [str(other_user.id)]

        liked = (await client.get(f"/api/v1/experiences/{experience['id']}")).json()["data"]
        assert liked["likes"] == 1
        assert liked["likedBy"] == [str(other_user.id)]
