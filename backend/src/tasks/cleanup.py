"""
Scheduled cleanup task.

This module provides time-based cleanup of expired API tokens and stale
weather snapshots. It plays the role of storage-level TTL eviction and is
designed to run as a cron job (e.g., daily at 3 AM).

Usage:
    python -m tasks.cleanup

The task:
1. Permanently deletes API tokens whose expires_at has passed
2. Deletes weather snapshots older than their retention window

Verification never relies on this task: expired tokens are rejected whether
or not they have been purged yet.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from db.session import create_engine, create_session_factory
from services.token_store import TokenStore
from services.weather_service import delete_expired_weather

logger = logging.getLogger(__name__)


@dataclass
class CleanupStats:
    """Statistics from a cleanup run."""

    expired_tokens_deleted: int = 0
    expired_weather_deleted: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to simple dict for logging/return."""
        return {
            "expired_tokens_deleted": self.expired_tokens_deleted,
            "expired_weather_deleted": self.expired_weather_deleted,
        }


async def cleanup_expired_tokens(
    db: AsyncSession,
    now: datetime | None = None,
) -> int:
    """
    Permanently delete API tokens whose expiry is at or before now.

    Revoked tokens without an expiry are kept for audit.

    Args:
        db: Database session.
        now: Current time for cutoff calculation. Defaults to datetime.now(UTC).

    Returns:
        Number of tokens deleted.
    """
    if now is None:
        now = datetime.now(UTC)

    deleted = await TokenStore(db).delete_expired(int(now.timestamp()))
    if deleted:
        logger.info("Deleted %d expired API tokens", deleted)
    return deleted


async def cleanup_expired_weather(
    db: AsyncSession,
    now: datetime | None = None,
) -> int:
    """
    Delete weather snapshots past their retention.

    Args:
        db: Database session.
        now: Current time for cutoff calculation. Defaults to datetime.now(UTC).

    Returns:
        Number of snapshots deleted.
    """
    if now is None:
        now = datetime.now(UTC)

    deleted = await delete_expired_weather(db, int(now.timestamp()))
    if deleted:
        logger.info("Deleted %d expired weather snapshots", deleted)
    return deleted


async def run_cleanup(
    db: AsyncSession | None = None,
    now: datetime | None = None,
) -> CleanupStats:
    """
    Run all cleanup operations and commit.

    Args:
        db: Optional database session. If not provided, one is created from settings.
        now: Current time for cutoff calculation. Defaults to datetime.now(UTC).

    Returns:
        CleanupStats with counts per operation.
    """
    if now is None:
        now = datetime.now(UTC)

    logger.info("Starting cleanup task")

    async def _run(session: AsyncSession) -> CleanupStats:
        stats = CleanupStats(
            expired_tokens_deleted=await cleanup_expired_tokens(session, now=now),
            expired_weather_deleted=await cleanup_expired_weather(session, now=now),
        )
        await session.commit()
        return stats

    if db is not None:
        stats = await _run(db)
    else:
        engine = create_engine(get_settings())
        try:
            async with create_session_factory(engine)() as session:
                stats = await _run(session)
        finally:
            await engine.dispose()

    logger.info("Cleanup complete: %s", stats.to_dict())
    return stats


def main() -> None:
    """Entry point for running cleanup as a script."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_cleanup())


if __name__ == "__main__":
    main()
