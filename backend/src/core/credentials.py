"""Classification of raw credentials into the kinds the gateway can verify."""
from dataclasses import dataclass

from core.token_codec import TOKEN_PREFIX, display_prefix


class InvalidCredentialFormatError(Exception):
    """Raised when a credential is missing or matches no known kind."""

    def __init__(self, message: str = "Invalid credential format") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class IdentityToken:
    """A signed JWT issued by the identity provider (Cognito id token)."""

    raw: str


@dataclass(frozen=True)
class ApiTokenCredential:
    """An opaque API token issued by this service."""

    raw: str

    @property
    def prefix(self) -> str:
        """Loggable identification of the token."""
        return display_prefix(self.raw)


Credential = IdentityToken | ApiTokenCredential


def _is_jws_compact(value: str) -> bool:
    parts = value.split(".")
    return len(parts) == 3 and all(parts)


def classify_credential(raw: str) -> Credential:
    """
    Determine which kind of credential raw is.

    Args:
        raw: The credential with any "Bearer " scheme already removed.

    Returns:
        ApiTokenCredential for values starting with the API token prefix,
        IdentityToken for three-part JWS compact strings.

    Raises:
        InvalidCredentialFormatError: If raw is neither.
    """
    if raw.startswith(TOKEN_PREFIX):
        return ApiTokenCredential(raw)
    if _is_jws_compact(raw):
        return IdentityToken(raw)
    raise InvalidCredentialFormatError
