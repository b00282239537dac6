"""Pydantic schemas for API token endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from schemas.validators import strip_if_str

MAX_EXPIRY_DAYS = 365


class TokenCreate(BaseModel):
    """Schema for issuing a new API token."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="User-provided name for the token, e.g., 'CI', 'Home Assistant'",
    )
    expires_in_days: int | None = Field(
        default=None,
        ge=1,
        le=MAX_EXPIRY_DAYS,
        description="Optional expiration in days (1-365). None means no expiration.",
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        """Trim surrounding whitespace so a blank name fails min_length."""
        return strip_if_str(v)


class TokenInfo(BaseModel):
    """
    Token metadata safe to return to the owner.

    Never includes the hash or the plaintext token.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    name: str
    prefix: str = Field(validation_alias=AliasChoices("prefix", "token_prefix"))
    created_at: datetime
    last_used_at: datetime | None = None
    expires_at: int | None = Field(
        default=None,
        description="Unix epoch seconds. None means the token never expires.",
    )
    revoked: bool


class TokenCreateResponse(BaseModel):
    """
    Response when issuing a new token.

    IMPORTANT: The `token` field contains the plaintext token and is only shown
    once at creation time. It cannot be retrieved again.
    """

    token: str = Field(
        ...,
        description="The plaintext token. Store this securely - it won't be shown again.",
    )
    token_info: TokenInfo


class TokenListResponse(BaseModel):
    """All of the caller's tokens, newest first."""

    tokens: list[TokenInfo]
