"""Location subscription model."""
from typing import TYPE_CHECKING

from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.weather_record import WeatherRecord


class Subscription(Base, UUIDv7Mixin, TimestampMixin):
    """A location a user wants weather for. Polled by tasks.fetch_weather."""

    __tablename__ = "subscriptions"

    user_id: Mapped[str] = mapped_column(String(255), index=True)
    location: Mapped[str] = mapped_column(
        String(200),
        comment="Display label, e.g., 'Berlin, DE'",
    )
    latitude: Mapped[float] = mapped_column(Float)
    longitude: Mapped[float] = mapped_column(Float)
    city: Mapped[str] = mapped_column(String(100), default="")
    country: Mapped[str] = mapped_column(String(100), default="")

    weather_records: Mapped[list["WeatherRecord"]] = relationship(
        back_populates="subscription",
        cascade="all, delete-orphan",
    )
