"""Tests for the current user's profile endpoints."""

from datetime import date

from httpx import AsyncClient

from gomeraway.models.user import User


class TestGetMe:
    """Test GET /api/v1/users/me."""

    async def test_returns_profile(self, client: AsyncClient, guest_user: User, guest_headers: dict):
        response = await client.get("/api/v1/users/me", headers=guest_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(guest_user.id)
        assert data["email"] == guest_user.email
        assert data["role"] == "guest"
        assert data["is_profile_complete"] is True
        assert data["missing_profile_fields"] == []

    async def test_incomplete_profile_lists_missing_fields(self, client: AsyncClient, make_user, auth_for):
        user = await make_user(role="guest", plan=None, complete_profile=False)
        data = (await client.get("/api/v1/users/me", headers=auth_for(user))).json()
        assert data["is_profile_complete"] is False
        assert data["missing_profile_fields"] == ["phone", "address", "city", "country", "date_of_birth"]

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me")
        assert response.status_code in (401, 403)


class TestUpdateMe:
    """Test PUT /api/v1/users/me."""

    async def test_partial_update(self, client: AsyncClient, guest_user: User, guest_headers: dict):
        response = await client.put("/api/v1/users/me", json={"city": "Agulo"}, headers=guest_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["city"] == "Agulo"
        assert data["phone"] == guest_user.phone
        assert data["date_of_birth"] == "1990-05-17"

    async def test_blank_field_makes_profile_incomplete(self, client: AsyncClient, guest_headers: dict):
        response = await client.put("/api/v1/users/me", json={"address": "   "}, headers=guest_headers)
        data = response.json()
        assert data["is_profile_complete"] is False
        assert data["missing_profile_fields"] == ["address"]

    async def test_email_and_role_cannot_be_changed(
        self, client: AsyncClient, guest_user: User, guest_headers: dict
    ):
        response = await client.put(
            "/api/v1/users/me",
            json={"email": "someone@else.com", "role": "admin"},
            headers=guest_headers,
        )
        assert response.status_code == 200
        assert response.json()["email"] == guest_user.email
        assert response.json()["role"] == "guest"


def test_missing_profile_fields_on_model():
    user = User(
        email="ana@test.com",
        full_name="Ana",
        phone="",
        address="Calle Real 1",
        city="Hermigua",
        country=None,
        date_of_birth=date(1990, 1, 1),
    )
    assert user.missing_profile_fields == ["phone", "country"]
    assert user.is_profile_complete is False
