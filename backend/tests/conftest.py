"""Pytest fixtures for testing."""
import os
from collections.abc import AsyncGenerator, Callable, Generator
from datetime import UTC, datetime, timedelta
from typing import Any

# Must be set before any app imports that trigger Settings validation
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from core.identity_provider import IdentityTokenVerifier
from models.base import Base
from services.openweather import OpenWeatherClient
from tests.factories import (
    OPENWEATHER_TEST_URL,
    TEST_CLIENT_ID,
    TEST_ISSUER,
    TEST_KID,
    StaticKeySource,
    current_weather_payload,
    forecast_payload,
)

# =============================================================================
# Database
# =============================================================================


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create a fresh in-memory SQLite database for each test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Create an async session for the test database."""
    async with session_factory() as session:
        yield session


# =============================================================================
# Identity provider
# =============================================================================


@pytest.fixture(scope="session")
def rsa_private_key() -> RSAPrivateKey:
    """Signing key standing in for the user pool's private key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def key_source(rsa_private_key: RSAPrivateKey) -> StaticKeySource:
    """Key source that resolves the test public key."""
    return StaticKeySource(rsa_private_key.public_key())


@pytest.fixture
def identity_verifier(key_source: StaticKeySource) -> IdentityTokenVerifier:
    """Verifier configured for the test user pool."""
    return IdentityTokenVerifier(
        issuer=TEST_ISSUER,
        client_id=TEST_CLIENT_ID,
        key_source=key_source,
    )


@pytest.fixture
def make_id_token(rsa_private_key: RSAPrivateKey) -> Callable[..., str]:
    """
    Factory that mints signed Cognito-style id tokens.

    Keyword arguments override or add claims; pass a claim as None to drop it.
    """
    def _make(
        sub: str = "user-123",
        signing_key: RSAPrivateKey | None = None,
        **claims: Any,
    ) -> str:
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": sub,
            "aud": TEST_CLIENT_ID,
            "iss": TEST_ISSUER,
            "token_use": "id",
            "iat": now,
            "exp": now + timedelta(hours=1),
            "email": f"{sub}@example.com",
        }
        payload.update(claims)
        payload = {k: v for k, v in payload.items() if v is not None}
        return jwt.encode(
            payload,
            signing_key or rsa_private_key,
            algorithm="RS256",
            headers={"kid": TEST_KID},
        )
    return _make


# =============================================================================
# Weather provider
# =============================================================================


@pytest.fixture
def weather_handler() -> Callable[[httpx.Request], httpx.Response]:
    """Default provider behaviour; override in tests to simulate failures."""
    def _handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/weather"):
            return httpx.Response(200, json=current_weather_payload())
        if request.url.path.endswith("/forecast"):
            return httpx.Response(200, json=forecast_payload())
        return httpx.Response(404)
    return _handler


@pytest.fixture
async def weather_client(
    weather_handler: Callable[[httpx.Request], httpx.Response],
) -> AsyncGenerator[OpenWeatherClient]:
    """OpenWeatherClient backed by an in-process mock transport."""
    client = OpenWeatherClient(
        api_key="test-key",
        base_url=OPENWEATHER_TEST_URL,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(weather_handler)),
    )
    yield client
    await client.aclose()


# =============================================================================
# Application
# =============================================================================


@pytest.fixture
def app_dependency_overrides(
    db_session: AsyncSession,
    identity_verifier: IdentityTokenVerifier,
    weather_client: OpenWeatherClient,
) -> Generator[None]:
    """Point the app's injected handles at the test doubles."""
    from api.dependencies import get_weather_client  # noqa: PLC0415
    from api.main import app  # noqa: PLC0415
    from core.auth import get_identity_verifier  # noqa: PLC0415
    from db.session import get_async_session  # noqa: PLC0415

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_identity_verifier] = lambda: identity_verifier
    app.dependency_overrides[get_weather_client] = lambda: weather_client
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def anon_client(
    app_dependency_overrides: None,  # noqa: ARG001
) -> AsyncGenerator[AsyncClient]:
    """Test client without credentials."""
    from api.main import app  # noqa: PLC0415

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client


@pytest.fixture
async def client(
    app_dependency_overrides: None,  # noqa: ARG001
    make_id_token: Callable[..., str],
) -> AsyncGenerator[AsyncClient]:
    """Test client authenticated as user-123 with a Cognito id token."""
    from api.main import app  # noqa: PLC0415

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {make_id_token('user-123')}"},
    ) as test_client:
        yield test_client


@pytest.fixture
async def other_client(
    app_dependency_overrides: None,  # noqa: ARG001
    make_id_token: Callable[..., str],
) -> AsyncGenerator[AsyncClient]:
    """Test client authenticated as a second user, other-456."""
    from api.main import app  # noqa: PLC0415

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {make_id_token('other-456')}"},
    ) as test_client:
        yield test_client
