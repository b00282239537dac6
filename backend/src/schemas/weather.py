"""Pydantic schemas for weather data."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class DailyForecast(BaseModel):
    """Aggregated forecast for one calendar day (UTC)."""

    date: str
    temp_min: float
    temp_max: float
    description: str
    icon: str
    precipitation: float


class CurrentWeather(BaseModel):
    """Current conditions for a subscription as of the latest fetch."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    subscription_id: UUID
    location: str
    temperature: float
    feels_like: float
    humidity: float
    pressure: float
    wind_speed: float
    wind_direction: float
    description: str
    icon: str
    observed_at: datetime
    fetched_at: datetime


class WeatherResponse(BaseModel):
    """Latest weather and forecast for one subscription."""

    current: CurrentWeather
    forecast: list[DailyForecast]
