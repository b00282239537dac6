"""SQLAlchemy models."""
from models.api_token import ApiToken
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.subscription import Subscription
from models.weather_record import WeatherRecord

__all__ = [
    "ApiToken",
    "Base",
    "Subscription",
    "TimestampMixin",
    "UUIDv7Mixin",
    "WeatherRecord",
]
