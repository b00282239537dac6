"""Pydantic schemas for subscription endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.validators import strip_if_str


class SubscriptionCreate(BaseModel):
    """Schema for subscribing to a location."""

    location: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display label, e.g., 'Berlin, DE'",
    )
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    city: str = Field(default="", max_length=100)
    country: str = Field(default="", max_length=100)

    @field_validator("location", "city", "country", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        """Trim surrounding whitespace."""
        return strip_if_str(v)


class SubscriptionResponse(BaseModel):
    """Schema for a stored subscription."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    location: str
    latitude: float
    longitude: float
    city: str
    country: str
    created_at: datetime
    updated_at: datetime


class SubscriptionCreateResponse(BaseModel):
    """Response when creating a subscription."""

    subscription: SubscriptionResponse


class SubscriptionListResponse(BaseModel):
    """All of the caller's subscriptions, newest first."""

    subscriptions: list[SubscriptionResponse]
