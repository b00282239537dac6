"""Location subscription endpoints."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_principal, get_weather_client
from core.request_context import Principal
from schemas.common import MessageResponse
from schemas.subscription import (
    SubscriptionCreate,
    SubscriptionCreateResponse,
    SubscriptionListResponse,
    SubscriptionResponse,
)
from services import subscription_service, weather_service
from services.exceptions import (
    SubscriptionForbiddenError,
    SubscriptionNotFoundError,
    WeatherProviderError,
)
from services.openweather import OpenWeatherClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post("", response_model=SubscriptionCreateResponse, status_code=201)
async def create_subscription(
    data: SubscriptionCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
    weather_client: OpenWeatherClient = Depends(get_weather_client),
) -> SubscriptionCreateResponse:
    """
    Subscribe to weather for a location.

    Weather is fetched immediately; if the provider fails the subscription is
    still created and the next scheduled fetch fills it in.
    """
    subscription = await subscription_service.create_subscription(
        db, principal.user_id, data,
    )
    try:
        await weather_service.fetch_and_store_weather(db, weather_client, subscription)
    except WeatherProviderError as e:
        logger.warning("Failed to fetch initial weather for %s: %s", subscription.location, e)

    return SubscriptionCreateResponse(
        subscription=SubscriptionResponse.model_validate(subscription),
    )


@router.get("", response_model=SubscriptionListResponse)
async def list_subscriptions(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> SubscriptionListResponse:
    """List the current user's subscriptions."""
    subscriptions = await subscription_service.get_subscriptions(db, principal.user_id)
    return SubscriptionListResponse(
        subscriptions=[SubscriptionResponse.model_validate(s) for s in subscriptions],
    )


@router.delete("/{subscription_id}", response_model=MessageResponse)
async def delete_subscription(
    subscription_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    """Delete a subscription and its stored weather."""
    try:
        await subscription_service.delete_subscription(db, principal.user_id, subscription_id)
    except SubscriptionNotFoundError:
        raise HTTPException(status_code=404, detail="Subscription not found")
    except SubscriptionForbiddenError:
        raise HTTPException(status_code=403, detail="Forbidden")
    return MessageResponse(message="Subscription deleted successfully")
