"""Request-scoped principal produced by the authorization gateway."""
from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID


class AuthType(StrEnum):
    """Authentication method used for the request."""

    COGNITO = "cognito"
    APIKEY = "apikey"


@dataclass(frozen=True)
class Principal:
    """
    The authenticated caller of a request.

    Exists only for the duration of one request and is never persisted.
    """

    user_id: str
    auth_type: AuthType
    token_id: UUID | None = None  # Only set for API token auth
    token_prefix: str | None = None  # Only set for API token auth, e.g. "wea_a3f8..."
