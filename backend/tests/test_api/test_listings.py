"""Tests for listing CRUD endpoints, plan gating, availability and quotes."""

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import inspect

from gomeraway.models.listing import Listing
from gomeraway.models.user import User

ACCOMMODATION = {
    "title": "Casa rural en Agulo",
    "type": "accommodation",
    "location": "Agulo, La Gomera",
    "price_per_night_or_day": "85.00",
    "description": "Stone house with views of Teide.",
    "accommodation_details": {"max_guests": 4, "bedrooms": 2, "bathrooms": 1, "amenities": "wifi, terrace"},
}

VEHICLE = {
    "title": "Jeep Wrangler 4x4",
    "type": "vehicle",
    "location": "San Sebastián de La Gomera",
    "price_per_night_or_day": "60.00",
    "vehicle_details": {"vehicle_type": "4x4", "seats": 4, "features": "air conditioning"},
}


class TestCreateListing:
    """Test POST /api/v1/listings."""

    async def test_create_accommodation_with_details(self, client: AsyncClient, host_headers: dict):
        response = await client.post("/api/v1/listings", json=ACCOMMODATION, headers=host_headers)
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["title"] == "Casa rural en Agulo"
        assert data["is_active"] is True
        assert Decimal(data["price_per_night_or_day"]) == Decimal("85.00")
        assert data["accommodation_details"]["max_guests"] == 4
        assert data["vehicle_details"] is None

    async def test_create_vehicle_with_details(self, client: AsyncClient, host_headers: dict):
        response = await client.post("/api/v1/listings", json=VEHICLE, headers=host_headers)
        assert response.status_code == 201, response.text
        assert response.json()["vehicle_details"]["seats"] == 4

    async def test_mismatched_details_rejected(self, client: AsyncClient, host_headers: dict):
        body = {**VEHICLE, "accommodation_details": {"max_guests": 2}}
        response = await client.post("/api/v1/listings", json=body, headers=host_headers)
        assert response.status_code == 422

    async def test_non_positive_price_rejected(self, client: AsyncClient, host_headers: dict):
        body = {**ACCOMMODATION, "price_per_night_or_day": "0"}
        response = await client.post("/api/v1/listings", json=body, headers=host_headers)
        assert response.status_code == 422

    async def test_unknown_type_rejected(self, client: AsyncClient, host_headers: dict):
        body = {**ACCOMMODATION, "type": "boat"}
        response = await client.post("/api/v1/listings", json=body, headers=host_headers)
        assert response.status_code == 422

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/v1/listings", json=ACCOMMODATION)
        assert response.status_code in (401, 403)


class TestListingLimit:
    """Active listings are capped by the host's plan."""

    async def test_basico_second_active_listing_blocked(
        self, client: AsyncClient, host_headers: dict, test_listing: Listing
    ):
        response = await client.post("/api/v1/listings", json=ACCOMMODATION, headers=host_headers)
        assert response.status_code == 402
        detail = response.json()["detail"]
        assert detail["limit"] == 1
        assert detail["current"] == 1
        assert detail["plan"] == "básico"
        assert detail["upgrade_url"] == "/api/v1/billing/checkout"
        assert "Upgrade" in detail["message"]

    async def test_inactive_draft_is_always_allowed(
        self, client: AsyncClient, host_headers: dict, test_listing: Listing
    ):
        body = {**ACCOMMODATION, "is_active": False}
        response = await client.post("/api/v1/listings", json=body, headers=host_headers)
        assert response.status_code == 201
        assert response.json()["is_active"] is False

    async def test_premium_allows_five(self, client: AsyncClient, make_user, make_listing, auth_for):
        host = await make_user(plan="premium")
        for i in range(4):
            await make_listing(host, title=f"Apartamento {i} en Valle Gran Rey")
        headers = auth_for(host)

        response = await client.post("/api/v1/listings", json=ACCOMMODATION, headers=headers)
        assert response.status_code == 201

        response = await client.post("/api/v1/listings", json=VEHICLE, headers=headers)
        assert response.status_code == 402
        assert response.json()["detail"]["limit"] == 5

    async def test_diamante_is_unlimited(self, client: AsyncClient, make_user, make_listing, auth_for):
        host = await make_user(plan="diamante")
        for i in range(12):
            await make_listing(host, title=f"Bungalow {i} en Playa Santiago")

        response = await client.post("/api/v1/listings", json=ACCOMMODATION, headers=auth_for(host))
        assert response.status_code == 201

    async def test_host_without_subscription_gets_basico(
        self, client: AsyncClient, make_user, make_listing, auth_for
    ):
        host = await make_user(plan=None)
        headers = auth_for(host)
        response = await client.post("/api/v1/listings", json=ACCOMMODATION, headers=headers)
        assert response.status_code == 201

        response = await client.post("/api/v1/listings", json=VEHICLE, headers=headers)
        assert response.status_code == 402
        assert response.json()["detail"]["plan"] == "básico"

    async def test_inactive_subscription_falls_back_to_basico(
        self, client: AsyncClient, make_user, make_listing, auth_for
    ):
        host = await make_user(plan="diamante", status="canceled")
        await make_listing(host)
        response = await client.post("/api/v1/listings", json=VEHICLE, headers=auth_for(host))
        assert response.status_code == 402

    async def test_unknown_plan_string_fails_closed(
        self, client: AsyncClient, make_user, make_listing, auth_for
    ):
        host = await make_user(plan="platinum")
        await make_listing(host)
        response = await client.post("/api/v1/listings", json=VEHICLE, headers=auth_for(host))
        assert response.status_code == 402


class TestActivation:
    """Reactivation is gated like creation."""

    async def test_reactivate_blocked_at_limit(
        self, client: AsyncClient, host_user: User, host_headers: dict, make_listing, test_listing: Listing
    ):
        draft = await make_listing(host_user, is_active=False, title="Finca en Vallehermoso")
        response = await client.post(f"/api/v1/listings/{draft.id}/activate", headers=host_headers)
        assert response.status_code == 402

    async def test_deactivate_frees_a_slot(
        self, client: AsyncClient, host_user: User, host_headers: dict, make_listing, test_listing: Listing
    ):
        draft = await make_listing(host_user, is_active=False, title="Finca en Vallehermoso")

        response = await client.post(f"/api/v1/listings/{test_listing.id}/deactivate", headers=host_headers)
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        response = await client.post(f"/api/v1/listings/{draft.id}/activate", headers=host_headers)
        assert response.status_code == 200
        assert response.json()["is_active"] is True

    async def test_activate_already_active_is_noop(
        self, client: AsyncClient, host_headers: dict, test_listing: Listing
    ):
        response = await client.post(f"/api/v1/listings/{test_listing.id}/activate", headers=host_headers)
        assert response.status_code == 200
        assert response.json()["is_active"] is True

    async def test_update_reactivation_is_gated(
        self, client: AsyncClient, host_user: User, host_headers: dict, make_listing, test_listing: Listing
    ):
        draft = await make_listing(host_user, is_active=False, title="Finca en Vallehermoso")
        response = await client.put(
            f"/api/v1/listings/{draft.id}", json={"is_active": True}, headers=host_headers
        )
        assert response.status_code == 402

    async def test_cannot_activate_someone_elses_listing(
        self, client: AsyncClient, guest_headers: dict, test_listing: Listing
    ):
        response = await client.post(f"/api/v1/listings/{test_listing.id}/deactivate", headers=guest_headers)
        assert response.status_code == 404


class TestReadListings:
    """Test public and owner reads."""

    async def test_public_list_shows_only_active(
        self, client: AsyncClient, host_user: User, make_listing, test_listing: Listing
    ):
        hidden = await make_listing(host_user, is_active=False, title="Borrador oculto")
        response = await client.get("/api/v1/listings")
        assert response.status_code == 200
        ids = {item["id"] for item in response.json()["items"]}
        assert str(test_listing.id) in ids
        assert str(hidden.id) not in ids

    async def test_filter_by_type_and_location(
        self, client: AsyncClient, make_user, make_listing, test_listing: Listing
    ):
        other_host = await make_user(plan="diamante")
        car = await make_listing(other_host, listing_type="vehicle", title="Fiat Panda")

        response = await client.get("/api/v1/listings", params={"type": "vehicle"})
        ids = {item["id"] for item in response.json()["items"]}
        assert str(car.id) in ids
        assert str(test_listing.id) not in ids

        response = await client.get("/api/v1/listings", params={"location": "hermigua"})
        ids = {item["id"] for item in response.json()["items"]}
        assert str(test_listing.id) in ids

    async def test_mine_includes_inactive(
        self, client: AsyncClient, host_user: User, host_headers: dict, make_listing, test_listing: Listing
    ):
        await make_listing(host_user, is_active=False, title="Borrador oculto")
        response = await client.get("/api/v1/listings/mine", headers=host_headers)
        assert response.status_code == 200
        assert response.json()["total"] == 2

    async def test_inactive_listing_hidden_from_public(
        self, client: AsyncClient, host_user: User, host_headers: dict, make_listing
    ):
        draft = await make_listing(host_user, is_active=False, title="Borrador oculto")
        assert (await client.get(f"/api/v1/listings/{draft.id}")).status_code == 404
        assert (await client.get(f"/api/v1/listings/{draft.id}", headers=host_headers)).status_code == 200

    async def test_get_missing_listing(self, client: AsyncClient):
        response = await client.get(f"/api/v1/listings/{uuid.uuid4()}")
        assert response.status_code == 404


class TestUpdateDelete:
    """Test PUT and DELETE."""

    async def test_update_price(self, client: AsyncClient, host_headers: dict, test_listing: Listing):
        response = await client.put(
            f"/api/v1/listings/{test_listing.id}",
            json={"price_per_night_or_day": "72.50"},
            headers=host_headers,
        )
        assert response.status_code == 200
        assert Decimal(response.json()["price_per_night_or_day"]) == Decimal("72.50")

    async def test_update_by_non_owner(self, client: AsyncClient, guest_headers: dict, test_listing: Listing):
        response = await client.put(
            f"/api/v1/listings/{test_listing.id}", json={"title": "Hijacked listing"}, headers=guest_headers
        )
        assert response.status_code == 404

    @pytest.mark.parametrize("field", ["title", "price_per_night_or_day", "is_active"])
    async def test_null_for_required_field_rejected(
        self, client: AsyncClient, host_headers: dict, test_listing: Listing, field: str
    ):
        response = await client.put(
            f"/api/v1/listings/{test_listing.id}", json={field: None}, headers=host_headers
        )
        assert response.status_code == 422

        response = await client.get(f"/api/v1/listings/{test_listing.id}", headers=host_headers)
        assert response.json()["title"] == "Casa rural en Hermigua"
        assert response.json()["is_active"] is True

    async def test_null_for_optional_field_clears_it(
        self, client: AsyncClient, host_headers: dict, test_listing: Listing
    ):
        response = await client.put(
            f"/api/v1/listings/{test_listing.id}", json={"location": None}, headers=host_headers
        )
        assert response.status_code == 200
        assert response.json()["location"] is None

    async def test_update_accommodation_details(self, client: AsyncClient, host_headers: dict):
        created = (await client.post("/api/v1/listings", json=ACCOMMODATION, headers=host_headers)).json()

        response = await client.put(
            f"/api/v1/listings/{created['id']}",
            json={"accommodation_details": {"max_guests": 8}},
            headers=host_headers,
        )
        assert response.status_code == 200, response.text
        details = response.json()["accommodation_details"]
        assert details["max_guests"] == 8
        assert details["bedrooms"] == 2
        assert details["amenities"] == "wifi, terrace"

    async def test_update_vehicle_details(
        self, client: AsyncClient, make_user, make_listing, auth_for
    ):
        host = await make_user(plan="premium")
        car = await make_listing(host, listing_type="vehicle", title="Fiat Panda")
        assert car.vehicle_details is None

        response = await client.put(
            f"/api/v1/listings/{car.id}",
            json={"vehicle_details": {"vehicle_type": "city car", "seats": 5}},
            headers=auth_for(host),
        )
        assert response.status_code == 200, response.text
        assert response.json()["vehicle_details"] == {"vehicle_type": "city car", "seats": 5, "features": None}

        response = await client.put(
            f"/api/v1/listings/{car.id}",
            json={"vehicle_details": {"features": "roof rack"}},
            headers=auth_for(host),
        )
        assert response.json()["vehicle_details"] == {"vehicle_type": "city car", "seats": 5, "features": "roof rack"}

    async def test_details_for_other_type_rejected(
        self, client: AsyncClient, host_headers: dict, test_listing: Listing
    ):
        response = await client.put(
            f"/api/v1/listings/{test_listing.id}",
            json={"vehicle_details": {"seats": 2}},
            headers=host_headers,
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "vehicle_details given for a listing of type accommodation"

    async def test_delete(self, client: AsyncClient, host_headers: dict, test_listing: Listing):
        response = await client.delete(f"/api/v1/listings/{test_listing.id}", headers=host_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Listing deleted"

        response = await client.get(f"/api/v1/listings/{test_listing.id}", headers=host_headers)
        assert response.status_code == 404

    async def test_delete_with_bookings(
        self,
        client: AsyncClient,
        host_headers: dict,
        guest_user: User,
        make_booking,
        test_listing: Listing,
        future_start: date,
    ):
        await make_booking(test_listing, guest_user, future_start, future_start + timedelta(days=2))
        bookings = inspect(Listing).relationships["bookings"]
        assert bookings.lazy == "select"
        assert bookings.passive_deletes is True

        response = await client.delete(f"/api/v1/listings/{test_listing.id}", headers=host_headers)
        assert response.status_code == 200


class TestAvailability:
    """Test GET /api/v1/listings/{id}/availability."""

    async def test_blocked_dates_cover_confirmed_bookings_only(
        self, client: AsyncClient, guest_user: User, make_booking, test_listing: Listing, future_start: date
    ):
        await make_booking(test_listing, guest_user, future_start, future_start + timedelta(days=2))
        await make_booking(
            test_listing,
            guest_user,
            future_start + timedelta(days=5),
            future_start + timedelta(days=6),
            status="pending_confirmation",
        )
        await make_booking(
            test_listing,
            guest_user,
            future_start + timedelta(days=8),
            future_start + timedelta(days=9),
            status="cancelled",
        )

        response = await client.get(
            f"/api/v1/listings/{test_listing.id}/availability",
            params={"from": future_start.isoformat(), "to": (future_start + timedelta(days=10)).isoformat()},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["blocked_before"] == date.today().isoformat()
        assert data["blocked_dates"] == [(future_start + timedelta(days=i)).isoformat() for i in range(3)]

    async def test_window_includes_past_days(self, client: AsyncClient, test_listing: Listing):
        today = date.today()
        response = await client.get(
            f"/api/v1/listings/{test_listing.id}/availability",
            params={"from": (today - timedelta(days=2)).isoformat(), "to": today.isoformat()},
        )
        assert response.json()["blocked_dates"] == [
            (today - timedelta(days=2)).isoformat(),
            (today - timedelta(days=1)).isoformat(),
        ]

    async def test_default_window(self, client: AsyncClient, test_listing: Listing):
        response = await client.get(f"/api/v1/listings/{test_listing.id}/availability")
        data = response.json()
        assert data["window_start"] == date.today().isoformat()
        assert data["window_end"] == (date.today() + timedelta(days=365)).isoformat()
        assert data["blocked_dates"] == []

    async def test_inverted_window_rejected(self, client: AsyncClient, test_listing: Listing, future_start: date):
        response = await client.get(
            f"/api/v1/listings/{test_listing.id}/availability",
            params={"from": future_start.isoformat(), "to": (future_start - timedelta(days=1)).isoformat()},
        )
        assert response.status_code == 422

    async def test_oversized_window_rejected(self, client: AsyncClient, test_listing: Listing):
        response = await client.get(
            f"/api/v1/listings/{test_listing.id}/availability",
            params={"from": "2030-01-01", "to": "2032-01-01"},
        )
        assert response.status_code == 422


class TestQuote:
    """Test POST /api/v1/listings/{id}/quote."""

    async def test_valid_quote(self, client: AsyncClient, test_listing: Listing):
        response = await client.post(
            f"/api/v1/listings/{test_listing.id}/quote",
            json={"start_date": "2030-06-13", "end_date": "2030-06-15"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["nights"] == 2
        assert Decimal(data["total"]) == Decimal("100.00")
        assert Decimal(data["deposit"]) == Decimal("10.00")

    async def test_start_only_is_not_an_error(self, client: AsyncClient, test_listing: Listing):
        response = await client.post(
            f"/api/v1/listings/{test_listing.id}/quote", json={"start_date": "2030-06-13"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert data["nights"] == 0
        assert data["total"] is None

    async def test_same_day_is_not_valid(self, client: AsyncClient, test_listing: Listing):
        response = await client.post(
            f"/api/v1/listings/{test_listing.id}/quote",
            json={"start_date": "2030-06-13", "end_date": "2030-06-13"},
        )
        assert response.json()["valid"] is False
