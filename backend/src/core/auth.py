"""
Authorization gateway for Cognito identity tokens and API tokens.

Every protected route depends on get_current_principal. The raw credential is
classified once (core.credentials) and dispatched to the matching verifier.
All authentication failures reach the caller as the same bare 401; the reason
is only logged.
"""
import asyncio
import logging
from datetime import datetime, UTC

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from core.credentials import (
    ApiTokenCredential,
    IdentityToken,
    InvalidCredentialFormatError,
    classify_credential,
)
from core.identity_provider import (
    IdentityProviderUnavailableError,
    IdentityTokenRejectedError,
    IdentityTokenVerifier,
)
from core.request_context import AuthType, Principal
from core.token_codec import hash_token, looks_like_api_token
from db.session import get_async_session
from services.token_store import TokenStore

logger = logging.getLogger(__name__)

# Read the raw header: API tokens may be sent with or without the Bearer scheme
authorization_header = APIKeyHeader(
    name="Authorization",
    auto_error=False,
    description="'Bearer <Cognito id token>' or '[Bearer ]wea_<api token>'",
)

BEARER_SCHEME = "bearer"


class CredentialRejectedError(Exception):
    """Raised when a well-formed credential fails verification."""

    pass


def extract_credential(authorization: str | None) -> str:
    """
    Strip the optional Bearer scheme from an Authorization header value.

    Raises:
        InvalidCredentialFormatError: If the header is missing or blank.
    """
    if authorization is None:
        raise InvalidCredentialFormatError("Missing Authorization header")

    value = authorization.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        value = rest.strip()

    if not value:
        raise InvalidCredentialFormatError("Empty credential")
    return value


async def verify_identity_token(
    credential: IdentityToken,
    verifier: IdentityTokenVerifier,
) -> Principal:
    """
    Validate a Cognito id token and build the principal from its subject.

    Verification runs in a worker thread because a JWKS refresh is a blocking
    HTTP fetch.

    Raises:
        CredentialRejectedError: If the token is invalid for any reason.
        IdentityProviderUnavailableError: If signing keys can't be fetched.
    """
    try:
        claims = await asyncio.to_thread(verifier.verify, credential.raw)
    except IdentityTokenRejectedError as e:
        logger.warning("Identity token rejected: %s", e)
        raise CredentialRejectedError from e

    return Principal(user_id=claims["sub"], auth_type=AuthType.COGNITO)


async def verify_api_token(
    credential: ApiTokenCredential,
    store: TokenStore,
    now: datetime | None = None,
) -> Principal:
    """
    Validate an API token against the stored hashes.

    The token is hashed before lookup, so the query never compares secrets
    directly. On success last_used_at is updated (uses flush, not commit).

    Raises:
        CredentialRejectedError: If the token is unknown, revoked, or expired.
    """
    if now is None:
        now = datetime.now(UTC)

    if not looks_like_api_token(credential.raw):
        logger.warning("API token %s rejected: malformed", credential.prefix)
        raise CredentialRejectedError

    api_token = await store.find_by_hash(hash_token(credential.raw))

    if api_token is None:
        logger.warning("API token %s rejected: not found", credential.prefix)
        raise CredentialRejectedError
    if api_token.revoked:
        logger.warning("API token %s rejected: revoked", credential.prefix)
        raise CredentialRejectedError
    if api_token.is_expired(now.timestamp()):
        logger.warning("API token %s rejected: expired", credential.prefix)
        raise CredentialRejectedError

    await store.touch_last_used(api_token.id, now)

    return Principal(
        user_id=api_token.user_id,
        auth_type=AuthType.APIKEY,
        token_id=api_token.id,
        token_prefix=api_token.token_prefix,
    )


async def verify_credential(
    raw: str,
    store: TokenStore,
    identity_verifier: IdentityTokenVerifier,
    now: datetime | None = None,
) -> Principal:
    """
    Classify a raw credential and verify it with the matching verifier.

    Raises:
        InvalidCredentialFormatError: If raw matches no credential kind.
        CredentialRejectedError: If verification fails.
    """
    match classify_credential(raw):
        case ApiTokenCredential() as credential:
            return await verify_api_token(credential, store, now=now)
        case IdentityToken() as credential:
            return await verify_identity_token(credential, identity_verifier)


async def authorize(
    authorization: str | None,
    store: TokenStore,
    identity_verifier: IdentityTokenVerifier,
    now: datetime | None = None,
) -> Principal:
    """
    Decide whether a request may proceed.

    Format problems are detected before any storage or key lookup.

    Raises:
        InvalidCredentialFormatError: Missing, blank, or unrecognized credential.
        CredentialRejectedError: Any verification failure.
        IdentityProviderUnavailableError: Signing keys can't be fetched.
    """
    raw = extract_credential(authorization)
    return await verify_credential(raw, store, identity_verifier, now=now)


def get_identity_verifier(request: Request) -> IdentityTokenVerifier:
    """Return the identity token verifier created at application startup."""
    return request.app.state.identity_verifier


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_principal(
    request: Request,
    authorization: str | None = Depends(authorization_header),
    db: AsyncSession = Depends(get_async_session),
    identity_verifier: IdentityTokenVerifier = Depends(get_identity_verifier),
) -> Principal:
    """
    Dependency that authenticates the request and returns its principal.

    Accepts Cognito id tokens (web UI) and API tokens starting with 'wea_'
    (scripts, integrations). Every request is verified independently.
    """
    try:
        principal = await authorize(authorization, TokenStore(db), identity_verifier)
    except InvalidCredentialFormatError as e:
        logger.info("Denied %s %s: %s", request.method, request.url.path, e)
        raise _unauthorized() from None
    except CredentialRejectedError:
        logger.info("Denied %s %s: credential rejected", request.method, request.url.path)
        raise _unauthorized() from None
    except IdentityProviderUnavailableError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not validate credentials",
        ) from None

    logger.debug("Authorized %s via %s", principal.user_id, principal.auth_type)
    return principal
