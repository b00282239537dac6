"""Service layer for API token issue, listing and revocation."""
import logging
from datetime import datetime, timedelta, UTC
from uuid import UUID

from core.token_codec import display_prefix, generate_token, hash_token
from models.api_token import ApiToken
from schemas.token import TokenCreate
from services.exceptions import TokenForbiddenError, TokenNotFoundError
from services.token_store import TokenStore

logger = logging.getLogger(__name__)


async def create_token(
    store: TokenStore,
    user_id: str,
    data: TokenCreate,
    now: datetime | None = None,
) -> tuple[ApiToken, str]:
    """
    Issue a new API token for a user.

    Args:
        store: Token store bound to the request session.
        user_id: Subject of the user creating the token.
        data: Token creation data (name, optional expiration).
        now: Issuance time. Defaults to datetime.now(UTC).

    Returns:
        Tuple of (ApiToken model, plaintext_token).
        The plaintext token is only available at creation time.
    """
    if now is None:
        now = datetime.now(UTC)

    plaintext = generate_token()

    expires_at = None
    if data.expires_in_days is not None:
        expires_at = int((now + timedelta(days=data.expires_in_days)).timestamp())

    api_token = ApiToken(
        user_id=user_id,
        name=data.name,
        token_hash=hash_token(plaintext),
        token_prefix=display_prefix(plaintext),
        created_at=now,
        updated_at=now,
        expires_at=expires_at,
        revoked=False,
    )
    await store.insert(api_token)

    logger.info(
        "Issued API token %s (%s) for user %s",
        api_token.id,
        api_token.token_prefix,
        user_id,
    )
    return api_token, plaintext


async def get_tokens(store: TokenStore, user_id: str) -> list[ApiToken]:
    """
    Get all API tokens for a user, newest first.

    Includes revoked and expired tokens so the owner can see their history.
    """
    return list(await store.list_by_user(user_id))


async def revoke_token(
    store: TokenStore,
    user_id: str,
    token_id: UUID,
) -> ApiToken:
    """
    Revoke an API token owned by user_id.

    Ownership is checked after the lookup so callers can tell a missing
    token from somebody else's. Revoking an already revoked token succeeds.

    Raises:
        TokenNotFoundError: If no token has this id.
        TokenForbiddenError: If the token belongs to another user.
    """
    api_token = await store.get(token_id)
    if api_token is None:
        raise TokenNotFoundError(token_id)
    if api_token.user_id != user_id:
        raise TokenForbiddenError(token_id)

    if not api_token.revoked:
        await store.mark_revoked(token_id)
        logger.info("Revoked API token %s (%s)", token_id, api_token.token_prefix)
    return api_token
