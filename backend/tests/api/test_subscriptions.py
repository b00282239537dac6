"""Tests for subscription endpoints."""
from collections.abc import Callable

import httpx
import pytest
from httpx import AsyncClient

from tests.factories import FAKE_UUID

BERLIN = {"location": "Berlin, DE", "latitude": 52.52, "longitude": 13.405}


async def subscribe(client: AsyncClient, payload: dict | None = None) -> dict:
    """Create a subscription and return it."""
    response = await client.post("/subscriptions", json=payload or BERLIN)
    assert response.status_code == 201
    return response.json()["subscription"]


async def test_create_subscription(client: AsyncClient) -> None:
    """Test creating a subscription returns the stored record."""
    subscription = await subscribe(
        client, {**BERLIN, "city": "Berlin", "country": "DE"},
    )

    assert subscription["user_id"] == "user-123"
    assert subscription["location"] == "Berlin, DE"
    assert subscription["latitude"] == 52.52
    assert subscription["city"] == "Berlin"
    assert subscription["country"] == "DE"
    assert "id" in subscription
    assert "created_at" in subscription


async def test_create_subscription_fetches_weather_immediately(client: AsyncClient) -> None:
    """Test weather is available right after subscribing."""
    subscription = await subscribe(client)

    response = await client.get(f"/weather/{subscription['id']}")
    assert response.status_code == 200


@pytest.mark.parametrize(
    "payload",
    [
        {"location": "", "latitude": 0, "longitude": 0},
        {"location": "x", "latitude": 120, "longitude": 0},
        {"location": "x", "latitude": 0, "longitude": 200},
        {"latitude": 0, "longitude": 0},
    ],
)
async def test_create_subscription_validation(client: AsyncClient, payload: dict) -> None:
    """Test invalid payloads are rejected with 422."""
    response = await client.post("/subscriptions", json=payload)
    assert response.status_code == 422


async def test_list_subscriptions_scoped_to_user(
    client: AsyncClient,
    other_client: AsyncClient,
) -> None:
    """Test users only see their own subscriptions."""
    mine = await subscribe(client)
    await subscribe(other_client)

    response = await client.get("/subscriptions")
    assert response.status_code == 200
    assert [s["id"] for s in response.json()["subscriptions"]] == [mine["id"]]


async def test_delete_subscription(client: AsyncClient) -> None:
    """Test deleting a subscription removes it and its weather."""
    subscription = await subscribe(client)

    response = await client.delete(f"/subscriptions/{subscription['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Subscription deleted successfully"}

    assert (await client.get("/subscriptions")).json() == {"subscriptions": []}
    assert (await client.get(f"/weather/{subscription['id']}")).status_code == 404


async def test_delete_subscription_not_found(client: AsyncClient) -> None:
    """Test deleting a missing subscription returns 404."""
    response = await client.delete(f"/subscriptions/{FAKE_UUID}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Subscription not found"


async def test_delete_other_users_subscription_forbidden(
    client: AsyncClient,
    other_client: AsyncClient,
) -> None:
    """Test a user cannot delete someone else's subscription."""
    theirs = await subscribe(other_client)

    response = await client.delete(f"/subscriptions/{theirs['id']}")
    assert response.status_code == 403

    listed = (await other_client.get("/subscriptions")).json()["subscriptions"]
    assert [s["id"] for s in listed] == [theirs["id"]]


class TestProviderOutage:
    """Subscribing still works when the weather provider is down."""

    @pytest.fixture
    def weather_handler(self) -> Callable[[httpx.Request], httpx.Response]:
        """Provider that always fails."""
        return lambda _: httpx.Response(500)

    async def test_create_subscription_survives_provider_error(
        self,
        client: AsyncClient,
    ) -> None:
        """Test the subscription is created and weather is simply not there yet."""
        subscription = await subscribe(client)

        response = await client.get(f"/weather/{subscription['id']}")
        assert response.status_code == 404
        assert response.json()["detail"] == "No weather data available yet"


class TestMalformedProviderResponse:
    """Subscribing still works when the provider answers with an unusable body."""

    @pytest.fixture
    def weather_handler(self) -> Callable[[httpx.Request], httpx.Response]:
        """Provider that returns HTML for current weather and nothing useful for forecasts."""
        def _handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/weather"):
                return httpx.Response(200, text="<html>Service Unavailable</html>")
            return httpx.Response(200, json={"cod": "200"})
        return _handler

    async def test_create_subscription_survives_malformed_body(
        self,
        client: AsyncClient,
    ) -> None:
        """Test the subscription is kept and no weather is stored."""
        subscription = await subscribe(client)

        listed = (await client.get("/subscriptions")).json()["subscriptions"]
        assert [s["id"] for s in listed] == [subscription["id"]]

        response = await client.get(f"/weather/{subscription['id']}")
        assert response.status_code == 404


class TestIncompleteProviderPayload:
    """Subscribing still works when the provider omits required fields."""

    @pytest.fixture
    def weather_handler(self) -> Callable[[httpx.Request], httpx.Response]:
        """Provider whose current-weather body has no measurements."""
        def _handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/weather"):
                return httpx.Response(200, json={"cod": 200, "dt": 1})
            return httpx.Response(200, json={"list": []})
        return _handler

    async def test_create_subscription_survives_incomplete_payload(
        self,
        client: AsyncClient,
    ) -> None:
        """Test a payload without `main` doesn't turn subscribing into a 500."""
        subscription = await subscribe(client)

        response = await client.get(f"/weather/{subscription['id']}")
        assert response.status_code == 404
