"""FastAPI dependencies for injection."""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import get_current_principal, get_identity_verifier
from core.config import get_settings
from db.session import get_async_session
from services.openweather import OpenWeatherClient
from services.token_store import TokenStore


def get_token_store(db: AsyncSession = Depends(get_async_session)) -> TokenStore:
    """Token store bound to the request session."""
    return TokenStore(db)


def get_weather_client(request: Request) -> OpenWeatherClient:
    """Return the weather provider client created at application startup."""
    return request.app.state.weather_client


__all__ = [
    "get_async_session",
    "get_current_principal",
    "get_identity_verifier",
    "get_settings",
    "get_token_store",
    "get_weather_client",
]
