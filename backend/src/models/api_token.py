"""API Token model for long-lived bearer tokens."""
from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, String, false
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin


class ApiToken(Base, UUIDv7Mixin, TimestampMixin):
    """
    API Token model for programmatic access (scripts, CI, integrations).

    Tokens are stored hashed - plaintext is only shown once at creation.
    The token_prefix allows identification without exposing the full token.
    Revocation is a one-way flag; rows are only physically removed by the
    cleanup task once expires_at has passed.
    """

    __tablename__ = "api_tokens"

    # id provided by UUIDv7Mixin
    user_id: Mapped[str] = mapped_column(
        String(255),
        index=True,
        comment="Identity provider subject claim of the owner",
    )
    name: Mapped[str] = mapped_column(
        String(100),
        comment="User-provided name, e.g., 'CI', 'Home Assistant'",
    )
    token_hash: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        comment="SHA-256 hash of the token",
    )
    token_prefix: Mapped[str] = mapped_column(
        String(12),
        comment="First 12 chars for identification, e.g., 'wea_Xk3mP9qR'",
    )
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    expires_at: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
        comment="Optional expiration as Unix epoch seconds",
    )
    revoked: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False,
    )

    def is_expired(self, now_epoch: float) -> bool:
        """True if the token has an expiry at or before now_epoch."""
        return self.expires_at is not None and self.expires_at <= now_epoch
