"""Tests for Order verification and tracking endpoints."""
import pytest


@pytest.fixture
def order_on_route(fake_upstream, make_order, make_route, make_driver_location):
    fake_upstream.orders = make_route(["DELIVERED", "OUT_FOR_DELIVERY"]) + [
        make_order(order_id=64531, delivery_seq=3)
    ]
    fake_upstream.driver_locations = [make_driver_location("giga")]
    return fake_upstream


async def verify(client, session_id="s1", identifier="Jane"):
    return await client.post(
        "/api/v1/orders/64531/verify",
        json={"session_id": session_id, "identifier": identifier},
    )


class TestCheckVerification:

    async def test_unverified(self, client):
        response = await client.get("/api/v1/orders/64531/verification", params={"session_id": "s1"})
        assert response.status_code == 200
        assert response.json() == {"order_id": "64531", "verified": False}

    async def test_verified_after_verify(self, client, order_on_route):
        await verify(client)
        response = await client.get("/api/v1/orders/64531/verification", params={"session_id": "s1"})
        assert response.json()["verified"] is True

    async def test_missing_session_is_unverified(self, client):
        response = await client.get("/api/v1/orders/64531/verification")
        assert response.json()["verified"] is False


class TestVerifyIdentity:

    async def test_success(self, client, order_on_route):
        response = await verify(client, identifier="201-555-7788")
        assert response.status_code == 200
        assert response.json()["kind"] == "verification"
        assert response.json()["success"] is True

    async def test_failure_counts_attempts(self, client, order_on_route):
        await verify(client, identifier="zzz999")
        response = await verify(client, identifier="zzz999")
        data = response.json()
        assert response.status_code == 200
        assert data["success"] is False
        assert data["failed_attempts"] == 2

    async def test_unknown_order(self, client, fake_upstream):
        response = await verify(client)
        assert response.status_code == 200
        assert response.json()["kind"] == "order_not_found"

    async def test_camel_case_session_id_accepted(self, client, order_on_route):
        response = await client.post(
            "/api/v1/orders/64531/verify",
            json={"sessionId": "s1", "identifier": "Doe"},
        )
        assert response.json()["success"] is True

    async def test_blank_identifier_returns_422(self, client, fake_upstream):
        response = await verify(client, identifier="   ")
        assert response.status_code == 422
        assert response.json()["kind"] == "invalid_input"
        assert response.json()["field"] == "identifier"

    async def test_non_numeric_order_id_returns_422(self, client):
        response = await client.post(
            "/api/v1/orders/abc/verify",
            json={"session_id": "s1", "identifier": "Jane"},
        )
        assert response.status_code == 422
        assert response.json()["field"] == "order_id"


class TestTracking:

    async def test_requires_verification(self, client, order_on_route):
        response = await client.get("/api/v1/orders/64531/tracking", params={"session_id": "s1"})
        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "verification_required"
        assert data["requires_verification"] is True
        assert data["success"] is False

    async def test_verify_then_track(self, client, order_on_route):
        await verify(client)

        response = await client.get("/api/v1/orders/64531/tracking", params={"session_id": "s1"})

        data = response.json()
        assert data["kind"] == "tracking"
        assert data["order_id"] == 64531
        assert data["driver"] == "Giga"
        assert data["route_progress"]["completed_stops"] == 1
        assert data["estimate"]["stops_away"] == 2

    async def test_other_session_still_blocked(self, client, order_on_route):
        await verify(client, session_id="s1")
        response = await client.get("/api/v1/orders/64531/tracking", params={"session_id": "s2"})
        assert response.json()["kind"] == "verification_required"

    async def test_missing_session_returns_422(self, client):
        response = await client.get("/api/v1/orders/64531/tracking")
        assert response.status_code == 422
        assert response.json()["field"] == "session_id"


class TestDriverLocation:

    async def test_requires_verification(self, client, order_on_route):
        response = await client.get(
            "/api/v1/orders/64531/driver-location", params={"session_id": "s1"}
        )
        assert response.json()["kind"] == "verification_required"

    async def test_verified_gets_location(self, client, order_on_route):
        await verify(client)

        response = await client.get(
            "/api/v1/orders/64531/driver-location", params={"session_id": "s1"}
        )

        data = response.json()
        assert data["kind"] == "driver_location"
        assert data["driver"] == "Giga"
        assert data["location"]["latitude"] == 40.7178
        assert data["location"]["driver_name"] == "giga"

    async def test_not_out_for_delivery(self, client, fake_upstream, make_order):
        fake_upstream.orders = [make_order(status="STARTED")]
        await verify(client)

        response = await client.get(
            "/api/v1/orders/64531/driver-location", params={"session_id": "s1"}
        )

        assert response.status_code == 200
        assert response.json()["kind"] == "not_out_for_delivery"
