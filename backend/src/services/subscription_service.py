"""Service layer for location subscriptions."""
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.subscription import Subscription
from schemas.subscription import SubscriptionCreate
from services.exceptions import SubscriptionForbiddenError, SubscriptionNotFoundError

logger = logging.getLogger(__name__)


async def create_subscription(
    db: AsyncSession,
    user_id: str,
    data: SubscriptionCreate,
) -> Subscription:
    """
    Create a subscription for a user.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    subscription = Subscription(user_id=user_id, **data.model_dump())
    db.add(subscription)
    await db.flush()
    logger.info(
        "Created subscription %s (%s) for user %s",
        subscription.id,
        subscription.location,
        user_id,
    )
    return subscription


async def get_subscriptions(db: AsyncSession, user_id: str) -> list[Subscription]:
    """Get all subscriptions for a user, newest first."""
    result = await db.execute(
        select(Subscription)
        .where(Subscription.user_id == user_id)
        .order_by(Subscription.created_at.desc()),
    )
    return list(result.scalars().all())


async def get_all_subscriptions(db: AsyncSession) -> list[Subscription]:
    """Get every subscription across all users (used by the polling task)."""
    result = await db.execute(select(Subscription).order_by(Subscription.created_at))
    return list(result.scalars().all())


async def get_owned_subscription(
    db: AsyncSession,
    user_id: str,
    subscription_id: UUID,
) -> Subscription:
    """
    Fetch a subscription and check it belongs to user_id.

    Raises:
        SubscriptionNotFoundError: If no subscription has this id.
        SubscriptionForbiddenError: If it belongs to another user.
    """
    subscription = await db.get(Subscription, subscription_id)
    if subscription is None:
        raise SubscriptionNotFoundError(subscription_id)
    if subscription.user_id != user_id:
        raise SubscriptionForbiddenError(subscription_id)
    return subscription


async def delete_subscription(
    db: AsyncSession,
    user_id: str,
    subscription_id: UUID,
) -> None:
    """
    Delete a subscription and its stored weather.

    Raises:
        SubscriptionNotFoundError: If no subscription has this id.
        SubscriptionForbiddenError: If it belongs to another user.
    """
    subscription = await get_owned_subscription(db, user_id, subscription_id)
    await db.delete(subscription)
    await db.flush()
    logger.info("Deleted subscription %s", subscription_id)
