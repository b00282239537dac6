"""OpenWeatherMap client and forecast aggregation."""
import logging
from collections import defaultdict
from datetime import datetime, UTC
from types import TracebackType
from typing import Any

import httpx

from core.config import Settings
from schemas.weather import DailyForecast
from services.exceptions import WeatherProviderError

logger = logging.getLogger(__name__)

USER_AGENT = "WeatherSubscriptions/1.0"
FORECAST_DAYS = 5


class OpenWeatherClient:
    """
    Async client for the OpenWeatherMap current-weather and forecast endpoints.

    Reuses one httpx.AsyncClient (and its connection pool) across calls; use
    as an async context manager or call aclose() when done.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openweathermap.org/data/2.5",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenWeatherClient":
        """Build a client from application settings."""
        return cls(
            api_key=settings.openweather_api_key,
            base_url=settings.openweather_base_url,
            timeout=settings.openweather_timeout,
        )

    async def __aenter__(self) -> "OpenWeatherClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _get(self, endpoint: str, latitude: float, longitude: float) -> dict[str, Any]:
        params = {
            "lat": latitude,
            "lon": longitude,
            "appid": self.api_key,
            "units": "metric",
        }
        try:
            response = await self._client.get(f"{self.base_url}/{endpoint}", params=params)
        except httpx.TimeoutException as e:
            raise WeatherProviderError(f"OpenWeatherMap {endpoint} request timed out") from e
        except httpx.RequestError as e:
            raise WeatherProviderError(f"OpenWeatherMap {endpoint} request failed: {e}") from e

        if response.status_code != 200:
            raise WeatherProviderError(
                f"OpenWeatherMap {endpoint} error: {response.status_code}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise WeatherProviderError(f"OpenWeatherMap {endpoint} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise WeatherProviderError(f"OpenWeatherMap {endpoint} returned unexpected payload")
        return data

    async def fetch_current(self, latitude: float, longitude: float) -> dict[str, Any]:
        """Fetch current conditions (the /weather endpoint)."""
        return await self._get("weather", latitude, longitude)

    async def fetch_forecast(self, latitude: float, longitude: float) -> dict[str, Any]:
        """Fetch the 5-day / 3-hour forecast (the /forecast endpoint)."""
        return await self._get("forecast", latitude, longitude)


def _first_condition(item: dict[str, Any]) -> dict[str, Any]:
    conditions = item.get("weather") or []
    return conditions[0] if conditions else {}


def aggregate_forecast(
    samples: list[dict[str, Any]],
    days: int = FORECAST_DAYS,
) -> list[DailyForecast]:
    """
    Collapse 3-hour forecast samples into one entry per UTC calendar day.

    For each day: the lowest temp_min and highest temp_max of any sample, the
    description and icon of the middle sample, and the highest probability of
    precipitation. Days are returned in date order, at most `days` of them.
    """
    temps: dict[str, list[float]] = defaultdict(list)
    descriptions: dict[str, list[str]] = defaultdict(list)
    icons: dict[str, list[str]] = defaultdict(list)
    precipitation: dict[str, list[float]] = defaultdict(list)

    for item in samples:
        date = datetime.fromtimestamp(item["dt"], UTC).date().isoformat()
        main = item.get("main", {})
        temps[date].extend([main["temp_min"], main["temp_max"]])
        condition = _first_condition(item)
        descriptions[date].append(condition.get("description", ""))
        icons[date].append(condition.get("icon", ""))
        precipitation[date].append(item.get("pop", 0.0))

    forecast = [
        DailyForecast(
            date=date,
            temp_min=min(temps[date]),
            temp_max=max(temps[date]),
            description=descriptions[date][len(descriptions[date]) // 2],
            icon=icons[date][len(icons[date]) // 2],
            precipitation=max(precipitation[date]),
        )
        for date in sorted(temps)
    ]
    return forecast[:days]
