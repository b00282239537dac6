"""API token management endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_current_principal, get_token_store
from core.request_context import Principal
from schemas.common import MessageResponse
from schemas.token import TokenCreate, TokenCreateResponse, TokenInfo, TokenListResponse
from services import token_service
from services.exceptions import TokenForbiddenError, TokenNotFoundError
from services.token_store import TokenStore

router = APIRouter(prefix="/tokens", tags=["tokens"])


@router.post("", response_model=TokenCreateResponse, status_code=201)
async def create_token(
    data: TokenCreate,
    principal: Principal = Depends(get_current_principal),
    store: TokenStore = Depends(get_token_store),
) -> TokenCreateResponse:
    """
    Issue a new API token.

    IMPORTANT: The plaintext token is only returned once. Store it securely.
    """
    api_token, plaintext = await token_service.create_token(store, principal.user_id, data)
    return TokenCreateResponse(
        token=plaintext,
        token_info=TokenInfo.model_validate(api_token),
    )


@router.get("", response_model=TokenListResponse)
async def list_tokens(
    principal: Principal = Depends(get_current_principal),
    store: TokenStore = Depends(get_token_store),
) -> TokenListResponse:
    """
    List all API tokens for the current user.

    Note: Plaintext tokens and hashes are never returned - only metadata.
    """
    tokens = await token_service.get_tokens(store, principal.user_id)
    return TokenListResponse(tokens=[TokenInfo.model_validate(t) for t in tokens])


@router.delete("/{token_id}", response_model=MessageResponse)
async def revoke_token(
    token_id: UUID,
    principal: Principal = Depends(get_current_principal),
    store: TokenStore = Depends(get_token_store),
) -> MessageResponse:
    """Revoke an API token. Revoking an already revoked token succeeds."""
    try:
        await token_service.revoke_token(store, principal.user_id, token_id)
    except TokenNotFoundError:
        raise HTTPException(status_code=404, detail="Token not found")
    except TokenForbiddenError:
        raise HTTPException(status_code=403, detail="Forbidden")
    return MessageResponse(message="Token revoked successfully")
