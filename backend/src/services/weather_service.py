"""Service layer for fetching, storing and reading weather snapshots."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.subscription import Subscription
from models.weather_record import WeatherRecord
from schemas.weather import CurrentWeather, DailyForecast, WeatherResponse
from services.exceptions import WeatherNotAvailableError, WeatherProviderError
from services.openweather import OpenWeatherClient, aggregate_forecast
from services.subscription_service import get_owned_subscription

logger = logging.getLogger(__name__)

# How long a snapshot is kept before the cleanup task deletes it
WEATHER_RETENTION_DAYS = 30


def build_weather_record(
    subscription: Subscription,
    current: dict[str, Any],
    forecast: list[DailyForecast],
    now: datetime,
) -> WeatherRecord:
    """Shape provider responses into a WeatherRecord for subscription."""
    main = current["main"]
    wind = current.get("wind", {})
    conditions = current.get("weather") or [{}]

    return WeatherRecord(
        subscription_id=subscription.id,
        location=subscription.location,
        temperature=main["temp"],
        feels_like=main["feels_like"],
        humidity=main["humidity"],
        pressure=main["pressure"],
        wind_speed=wind.get("speed", 0.0),
        wind_direction=wind.get("deg", 0.0),
        description=conditions[0].get("description", ""),
        icon=conditions[0].get("icon", ""),
        observed_at=datetime.fromtimestamp(current["dt"], UTC),
        fetched_at=now,
        forecast=[day.model_dump() for day in forecast],
        expires_at=int((now + timedelta(days=WEATHER_RETENTION_DAYS)).timestamp()),
    )


@dataclass
class ProviderWeather:
    """Raw provider responses for one subscription."""

    current: dict[str, Any]
    forecast: dict[str, Any]


async def fetch_weather(
    client: OpenWeatherClient,
    subscription: Subscription,
) -> ProviderWeather:
    """
    Fetch current weather and forecast for a subscription.

    Raises:
        WeatherProviderError: If either provider call fails.
    """
    logger.info("Fetching weather for %s", subscription.location)
    current = await client.fetch_current(subscription.latitude, subscription.longitude)
    forecast = await client.fetch_forecast(subscription.latitude, subscription.longitude)
    return ProviderWeather(current=current, forecast=forecast)


async def store_weather(
    db: AsyncSession,
    subscription: Subscription,
    weather: ProviderWeather,
    now: datetime | None = None,
) -> WeatherRecord:
    """
    Store a snapshot built from provider responses.

    Raises:
        WeatherProviderError: If the responses are missing required fields.

    Note:
        Does not commit. Caller handles commit.
    """
    if now is None:
        now = datetime.now(UTC)

    try:
        record = build_weather_record(
            subscription,
            weather.current,
            aggregate_forecast(weather.forecast.get("list") or []),
            now,
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise WeatherProviderError(
            f"Malformed OpenWeatherMap payload for {subscription.location}: {e!r}",
        ) from e
    db.add(record)
    await db.flush()
    logger.info("Weather data stored for %s", subscription.location)
    return record


async def fetch_and_store_weather(
    db: AsyncSession,
    client: OpenWeatherClient,
    subscription: Subscription,
    now: datetime | None = None,
) -> WeatherRecord:
    """
    Fetch and store weather for a single subscription.

    Raises:
        WeatherProviderError: If either provider call fails or returns a
            payload that can't be shaped into a snapshot.
    """
    weather = await fetch_weather(client, subscription)
    return await store_weather(db, subscription, weather, now=now)


async def get_latest_weather(
    db: AsyncSession,
    user_id: str,
    subscription_id: UUID,
) -> WeatherResponse:
    """
    Latest stored weather for one of the user's subscriptions.

    Raises:
        SubscriptionNotFoundError: If no subscription has this id.
        SubscriptionForbiddenError: If it belongs to another user.
        WeatherNotAvailableError: If nothing has been fetched yet.
    """
    await get_owned_subscription(db, user_id, subscription_id)

    result = await db.execute(
        select(WeatherRecord)
        .where(WeatherRecord.subscription_id == subscription_id)
        .order_by(WeatherRecord.fetched_at.desc())
        .limit(1),
    )
    record = result.scalar_one_or_none()
    if record is None:
        raise WeatherNotAvailableError(subscription_id)

    return WeatherResponse(
        current=CurrentWeather.model_validate(record),
        forecast=[DailyForecast.model_validate(day) for day in record.forecast or []],
    )


async def delete_expired_weather(db: AsyncSession, now_epoch: int) -> int:
    """Delete snapshots whose retention has lapsed. Returns the row count."""
    result = await db.execute(
        delete(WeatherRecord).where(WeatherRecord.expires_at <= now_epoch),
    )
    return result.rowcount
