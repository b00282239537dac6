"""
Tests for request authentication at the HTTP layer.

Every failure mode must produce the same bare 401 so callers can't tell a
revoked token from an unknown one or a malformed header.
"""
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest
from httpx import AsyncClient, Response
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from core.identity_provider import IdentityTokenVerifier
from core.token_codec import generate_token
from models.api_token import ApiToken
from tests.factories import TEST_CLIENT_ID, UnreachableKeySource

UNAUTHORIZED = {"detail": "Unauthorized"}


async def issue_token(client: AsyncClient, **extra: object) -> dict:
    """Issue a token for user-123 through the API."""
    response = await client.post("/tokens", json={"name": "auth-test", **extra})
    assert response.status_code == 201
    return response.json()


def assert_unauthorized(response: Response) -> None:
    """All rejections look identical."""
    assert response.status_code == 401
    assert response.json() == UNAUTHORIZED
    assert response.headers["WWW-Authenticate"] == "Bearer"


# =============================================================================
# Accepted credentials
# =============================================================================


async def test_cognito_id_token_accepted(client: AsyncClient) -> None:
    """A valid id token authenticates as its subject."""
    response = await client.get("/tokens")
    assert response.status_code == 200


async def test_api_token_raw_header_accepted(
    client: AsyncClient,
    anon_client: AsyncClient,
) -> None:
    """API tokens may be sent without the Bearer scheme."""
    created = await issue_token(client)

    response = await anon_client.get("/tokens", headers={"Authorization": created["token"]})
    assert response.status_code == 200


async def test_api_token_bearer_header_accepted(
    client: AsyncClient,
    anon_client: AsyncClient,
) -> None:
    """API tokens may be sent with the Bearer scheme."""
    created = await issue_token(client)

    response = await anon_client.get(
        "/tokens", headers={"Authorization": f"bearer {created['token']}"},
    )
    assert response.status_code == 200


# =============================================================================
# Uniform rejection
# =============================================================================


async def test_missing_header(anon_client: AsyncClient) -> None:
    """No Authorization header is 401."""
    assert_unauthorized(await anon_client.get("/tokens"))


@pytest.mark.parametrize(
    "header",
    ["garbage", "Bearer garbage", "Bearer", "Basic dXNlcjpwYXNz", "Bearer a.b"],
)
async def test_malformed_header(anon_client: AsyncClient, header: str) -> None:
    """Unrecognized credentials are 401."""
    assert_unauthorized(await anon_client.get("/tokens", headers={"Authorization": header}))


async def test_unknown_api_token(anon_client: AsyncClient) -> None:
    """A well-formed token that was never issued is 401."""
    response = await anon_client.get("/tokens", headers={"Authorization": generate_token()})
    assert_unauthorized(response)


async def test_truncated_api_token(client: AsyncClient, anon_client: AsyncClient) -> None:
    """A token missing characters is 401."""
    created = await issue_token(client)

    response = await anon_client.get(
        "/tokens", headers={"Authorization": created["token"][:-1]},
    )
    assert_unauthorized(response)


async def test_revoked_api_token(client: AsyncClient, anon_client: AsyncClient) -> None:
    """A revoked token is 401."""
    created = await issue_token(client)
    await client.delete(f"/tokens/{created['token_info']['id']}")

    response = await anon_client.get("/tokens", headers={"Authorization": created["token"]})
    assert_unauthorized(response)


async def test_expired_api_token(
    client: AsyncClient,
    anon_client: AsyncClient,
    db_session: AsyncSession,
) -> None:
    """A token past its expiry is 401 even before cleanup removes it."""
    created = await issue_token(client, expires_in_days=1)
    past = int((datetime.now(UTC) - timedelta(seconds=1)).timestamp())
    await db_session.execute(
        update(ApiToken)
        .where(ApiToken.id == UUID(created["token_info"]["id"]))
        .values(expires_at=past),
    )

    response = await anon_client.get("/tokens", headers={"Authorization": created["token"]})
    assert_unauthorized(response)


async def test_expired_id_token(
    anon_client: AsyncClient,
    make_id_token: Callable[..., str],
) -> None:
    """An expired id token is 401."""
    past = datetime.now(UTC) - timedelta(hours=2)
    token = make_id_token(iat=past, exp=past + timedelta(hours=1))

    response = await anon_client.get("/tokens", headers={"Authorization": f"Bearer {token}"})
    assert_unauthorized(response)


async def test_id_token_for_other_client(
    anon_client: AsyncClient,
    make_id_token: Callable[..., str],
) -> None:
    """An id token issued to another app client is 401."""
    token = make_id_token(aud="not-our-client")

    response = await anon_client.get("/tokens", headers={"Authorization": f"Bearer {token}"})
    assert_unauthorized(response)


async def test_access_token_instead_of_id_token(
    anon_client: AsyncClient,
    make_id_token: Callable[..., str],
) -> None:
    """Cognito access tokens are 401."""
    token = make_id_token(token_use="access")

    response = await anon_client.get("/tokens", headers={"Authorization": f"Bearer {token}"})
    assert_unauthorized(response)


async def test_identity_provider_unavailable(
    anon_client: AsyncClient,
    make_id_token: Callable[..., str],
) -> None:
    """A JWKS outage is a 503, not a 401."""
    from api.main import app  # noqa: PLC0415
    from core.auth import get_identity_verifier  # noqa: PLC0415

    app.dependency_overrides[get_identity_verifier] = lambda: IdentityTokenVerifier(
        issuer="https://issuer.test",
        client_id=TEST_CLIENT_ID,
        key_source=UnreachableKeySource(),
    )

    response = await anon_client.get(
        "/tokens", headers={"Authorization": f"Bearer {make_id_token()}"},
    )
    assert response.status_code == 503


async def test_every_protected_route_requires_auth(anon_client: AsyncClient) -> None:
    """No protected endpoint is reachable anonymously."""
    some_id = "00000000-0000-0000-0000-000000000001"
    requests = [
        ("POST", "/tokens"),
        ("GET", "/tokens"),
        ("DELETE", f"/tokens/{some_id}"),
        ("POST", "/subscriptions"),
        ("GET", "/subscriptions"),
        ("DELETE", f"/subscriptions/{some_id}"),
        ("GET", f"/weather/{some_id}"),
    ]
    for method, url in requests:
        response = await anon_client.request(method, url)
        assert response.status_code == 401, (method, url)


async def test_health_is_public(anon_client: AsyncClient) -> None:
    """The health check needs no credentials."""
    response = await anon_client.get("/health")
    assert response.status_code == 200
