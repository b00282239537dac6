"""Verification of identity tokens issued by the Cognito user pool."""
import logging
from typing import Any, Protocol

import jwt
from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientConnectionError

from core.config import Settings

logger = logging.getLogger(__name__)

# Cognito issues both "id" and "access" tokens from the same keys; only id
# tokens carry the app client as audience.
EXPECTED_TOKEN_USE = "id"


class SigningKeySource(Protocol):
    """Anything that can resolve the signing key for a JWT (e.g. PyJWKClient)."""

    def get_signing_key_from_jwt(self, token: str) -> Any: ...


class IdentityTokenRejectedError(Exception):
    """Raised when an identity token fails signature or claim validation."""

    pass


class IdentityProviderUnavailableError(Exception):
    """Raised when the identity provider's signing keys cannot be fetched."""

    pass


class IdentityTokenVerifier:
    """
    Validates Cognito id tokens against the user pool's JWKS.

    One instance is created at startup and shared across requests; the
    underlying PyJWKClient caches the key set and refetches it when a token
    references an unknown key id (key rotation).
    """

    def __init__(
        self,
        issuer: str,
        client_id: str,
        key_source: SigningKeySource,
        algorithms: tuple[str, ...] = ("RS256",),
    ) -> None:
        self.issuer = issuer
        self.client_id = client_id
        self.key_source = key_source
        self.algorithms = list(algorithms)

    @classmethod
    def from_settings(cls, settings: Settings) -> "IdentityTokenVerifier":
        """Build a verifier with a cached JWKS client for the configured user pool."""
        jwks_client = PyJWKClient(
            settings.cognito_jwks_url,
            cache_jwk_set=True,
            lifespan=settings.jwks_cache_seconds,
        )
        return cls(
            issuer=settings.cognito_issuer,
            client_id=settings.cognito_client_id,
            key_source=jwks_client,
        )

    def verify(self, token: str) -> dict[str, Any]:
        """
        Decode and validate an identity token.

        Returns:
            The token claims.

        Raises:
            IdentityTokenRejectedError: If the signature, audience, issuer,
                expiry or token_use claim is invalid.
            IdentityProviderUnavailableError: If the JWKS could not be fetched.
        """
        try:
            signing_key = self.key_source.get_signing_key_from_jwt(token)
            claims = jwt.decode(
                token,
                signing_key.key,
                algorithms=self.algorithms,
                audience=self.client_id,
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except PyJWKClientConnectionError as e:
            logger.error("Failed to fetch JWKS from identity provider: %s", e, exc_info=True)
            raise IdentityProviderUnavailableError(str(e)) from e
        except jwt.ExpiredSignatureError as e:
            raise IdentityTokenRejectedError("Token has expired") from e
        except jwt.InvalidAudienceError as e:
            raise IdentityTokenRejectedError("Invalid audience") from e
        except jwt.InvalidIssuerError as e:
            raise IdentityTokenRejectedError("Invalid issuer") from e
        except jwt.PyJWTError as e:
            raise IdentityTokenRejectedError(f"Invalid token: {e}") from e

        if claims.get("token_use") != EXPECTED_TOKEN_USE:
            raise IdentityTokenRejectedError(
                f"Unexpected token_use: {claims.get('token_use')!r}",
            )
        return claims
