"""
Scheduled weather polling task.

Fetches current weather and forecast for every subscription and stores a new
snapshot for each. Designed to be run by an external scheduler on a fixed
interval (e.g., cron every 30 minutes).

Usage:
    python -m tasks.fetch_weather

A provider failure for one subscription is logged and counted; the others
are still processed.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from db.session import create_engine, create_session_factory
from services.exceptions import WeatherProviderError
from services.openweather import OpenWeatherClient
from services.subscription_service import get_all_subscriptions
from services.weather_service import fetch_weather, store_weather

logger = logging.getLogger(__name__)


@dataclass
class FetchStats:
    """Statistics from a polling run."""

    subscriptions: int = 0
    stored: int = 0
    failed: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to simple dict for logging/return."""
        return {
            "subscriptions": self.subscriptions,
            "stored": self.stored,
            "failed": self.failed,
        }


async def fetch_all_weather(
    db: AsyncSession,
    client: OpenWeatherClient,
    now: datetime | None = None,
) -> FetchStats:
    """
    Fetch and store weather for every subscription.

    Provider calls run concurrently. Writes happen afterwards, one at a time,
    because a session must not be used from concurrent tasks.

    Args:
        db: Database session.
        client: Weather provider client.
        now: Fetch time recorded on the snapshots. Defaults to datetime.now(UTC).

    Returns:
        FetchStats with counts of stored and failed subscriptions.
    """
    if now is None:
        now = datetime.now(UTC)

    subscriptions = await get_all_subscriptions(db)
    logger.info("Found %d subscriptions", len(subscriptions))
    stats = FetchStats(subscriptions=len(subscriptions))

    results = await asyncio.gather(
        *(fetch_weather(client, subscription) for subscription in subscriptions),
        return_exceptions=True,
    )

    for subscription, result in zip(subscriptions, results, strict=True):
        if isinstance(result, WeatherProviderError):
            logger.warning("Error fetching weather for %s: %s", subscription.location, result)
            stats.failed += 1
            continue
        if isinstance(result, BaseException):
            raise result
        try:
            await store_weather(db, subscription, result, now=now)
        except WeatherProviderError as e:
            logger.warning("Error storing weather for %s: %s", subscription.location, e)
            stats.failed += 1
            continue
        stats.stored += 1

    return stats


async def run_fetch_weather(
    db: AsyncSession | None = None,
    client: OpenWeatherClient | None = None,
    now: datetime | None = None,
) -> FetchStats:
    """
    Run one polling pass and commit.

    Args:
        db: Optional database session. If not provided, one is created from settings.
        client: Optional provider client. If not provided, one is created from settings.
        now: Fetch time. Defaults to datetime.now(UTC).
    """
    logger.info("Fetching weather data for all subscriptions")

    own_client = client is None
    if client is None:
        client = OpenWeatherClient.from_settings(get_settings())

    try:
        if db is not None:
            stats = await fetch_all_weather(db, client, now=now)
            await db.commit()
        else:
            engine = create_engine(get_settings())
            try:
                async with create_session_factory(engine)() as session:
                    stats = await fetch_all_weather(session, client, now=now)
                    await session.commit()
            finally:
                await engine.dispose()
    finally:
        if own_client:
            await client.aclose()

    logger.info("Weather fetch complete: %s", stats.to_dict())
    return stats


def main() -> None:
    """Entry point for running the polling pass as a script."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_fetch_weather())


if __name__ == "__main__":
    main()
