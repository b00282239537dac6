"""Persistence operations for API tokens."""
from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.api_token import ApiToken


class TokenStore:
    """
    Thin adapter over the api_tokens table.

    Every lookup goes through an index: the primary key, the unique
    token_hash index, or the user_id index.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def insert(self, api_token: ApiToken) -> ApiToken:
        """Persist a new token. A duplicate id or hash raises IntegrityError on flush."""
        self.db.add(api_token)
        await self.db.flush()
        return api_token

    async def get(self, token_id: UUID) -> ApiToken | None:
        """Fetch a token by id regardless of owner."""
        return await self.db.get(ApiToken, token_id)

    async def find_by_hash(self, token_hash: str) -> ApiToken | None:
        """Fetch the token whose stored hash equals token_hash."""
        result = await self.db.execute(
            select(ApiToken).where(ApiToken.token_hash == token_hash),
        )
        return result.scalar_one_or_none()

    async def list_by_user(self, user_id: str) -> Sequence[ApiToken]:
        """All tokens owned by user_id, newest first."""
        result = await self.db.execute(
            select(ApiToken)
            .where(ApiToken.user_id == user_id)
            .order_by(ApiToken.created_at.desc(), ApiToken.id.desc()),
        )
        return result.scalars().all()

    async def mark_revoked(self, token_id: UUID) -> None:
        """
        Set revoked on a token.

        A single UPDATE statement, so it is atomic and revoking an
        already-revoked token is a no-op.
        """
        await self.db.execute(
            update(ApiToken)
            .where(ApiToken.id == token_id)
            .values(revoked=True),
        )

    async def touch_last_used(self, token_id: UUID, when: datetime) -> None:
        """Record a successful verification."""
        await self.db.execute(
            update(ApiToken)
            .where(ApiToken.id == token_id)
            .values(last_used_at=when),
        )

    async def delete_expired(self, now_epoch: int) -> int:
        """Delete tokens whose expiry is at or before now_epoch. Returns the row count."""
        result = await self.db.execute(
            delete(ApiToken).where(
                ApiToken.expires_at.is_not(None),
                ApiToken.expires_at <= now_epoch,
            ),
        )
        return result.rowcount
