"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import health, subscriptions, tokens, weather
from core.config import get_settings
from core.identity_provider import IdentityTokenVerifier
from db.session import create_engine, create_session_factory
from services.openweather import OpenWeatherClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """
    Manage application lifespan - startup and shutdown.

    Long-lived handles (connection pool, JWKS cache, weather HTTP client) are
    built once here and shared by all requests through app.state.
    """
    app_settings = get_settings()

    engine = create_engine(app_settings)
    app.state.session_factory = create_session_factory(engine)
    app.state.identity_verifier = IdentityTokenVerifier.from_settings(app_settings)
    app.state.weather_client = OpenWeatherClient.from_settings(app_settings)
    logger.info("Application started")

    yield

    await app.state.weather_client.aclose()
    await engine.dispose()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # HSTS: enforce HTTPS for 1 year, including subdomains
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking - API shouldn't be framed
        response.headers["X-Frame-Options"] = "DENY"
        # Responses may carry a freshly issued plaintext token
        response.headers["Cache-Control"] = "no-store"
        return response


def create_app() -> FastAPI:
    """Build the application with middleware and routers."""
    app_settings = get_settings()

    application = FastAPI(
        title="Weather Subscriptions API",
        description="Subscribe to locations and read their latest weather and forecast.",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Security headers middleware (runs after CORS, adds headers to responses)
    application.add_middleware(SecurityHeadersMiddleware)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    application.include_router(health.router)
    application.include_router(tokens.router)
    application.include_router(subscriptions.router)
    application.include_router(weather.router)
    return application


app = create_app()
