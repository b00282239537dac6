"""Weather snapshot model."""
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import JSON, BigInteger, DateTime, Float, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, UUIDv7Mixin, utc_now

if TYPE_CHECKING:
    from models.subscription import Subscription


class WeatherRecord(Base, UUIDv7Mixin):
    """
    One fetch of current conditions plus the aggregated daily forecast.

    Records are append-only; readers take the newest by fetched_at. The
    cleanup task removes rows once expires_at has passed.
    """

    __tablename__ = "weather_records"
    __table_args__ = (
        Index("ix_weather_records_subscription_fetched", "subscription_id", "fetched_at"),
    )

    subscription_id: Mapped[UUID] = mapped_column(
        ForeignKey("subscriptions.id", ondelete="CASCADE"),
    )
    location: Mapped[str] = mapped_column(String(200))
    temperature: Mapped[float] = mapped_column(Float)
    feels_like: Mapped[float] = mapped_column(Float)
    humidity: Mapped[float] = mapped_column(Float)
    pressure: Mapped[float] = mapped_column(Float)
    wind_speed: Mapped[float] = mapped_column(Float)
    wind_direction: Mapped[float] = mapped_column(Float)
    description: Mapped[str] = mapped_column(String(200), default="")
    icon: Mapped[str] = mapped_column(String(20), default="")
    observed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        comment="Observation time reported by the provider",
    )
    fetched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
    )
    forecast: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    expires_at: Mapped[int] = mapped_column(
        BigInteger,
        index=True,
        comment="Unix epoch seconds after which the cleanup task deletes the row",
    )

    subscription: Mapped["Subscription"] = relationship(back_populates="weather_records")
