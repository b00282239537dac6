"""Weather read endpoint."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_principal
from core.request_context import Principal
from schemas.weather import WeatherResponse
from services import weather_service
from services.exceptions import (
    SubscriptionForbiddenError,
    SubscriptionNotFoundError,
    WeatherNotAvailableError,
)

router = APIRouter(prefix="/weather", tags=["weather"])


@router.get("/{subscription_id}", response_model=WeatherResponse)
async def get_weather(
    subscription_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_session),
) -> WeatherResponse:
    """Latest weather and daily forecast for one of the user's subscriptions."""
    try:
        return await weather_service.get_latest_weather(db, principal.user_id, subscription_id)
    except SubscriptionNotFoundError:
        raise HTTPException(status_code=404, detail="Subscription not found")
    except SubscriptionForbiddenError:
        raise HTTPException(status_code=403, detail="Forbidden")
    except WeatherNotAvailableError as e:
        raise HTTPException(status_code=404, detail=str(e))
