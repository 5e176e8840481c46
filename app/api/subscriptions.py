from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.models.users import Users
from app.schemas.base import ApiResponse, api_response
from app.schemas.channel import SubscriptionToggleResponse
from app.schemas.user import OwnerSummary
from app.services.subscription_service import SubscriptionService
from app.services.view_service import ViewService
from app.utils.security import get_current_user

subscriptions_router = APIRouter()


@subscriptions_router.post("/c/{channel_id}", response_model=ApiResponse[SubscriptionToggleResponse])
async def toggle_subscription(
    channel_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    is_subscribed, subscribers_count = await SubscriptionService(db).toggle(current_user.id, channel_id)
    return api_response(
        SubscriptionToggleResponse(is_subscribed=is_subscribed, subscribers_count=subscribers_count),
        "Subscription toggled successfully",
    )


@subscriptions_router.get("/c/{channel_id}", response_model=ApiResponse[List[OwnerSummary]])
async def get_channel_subscribers(
    channel_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    subscribers = await ViewService(db).channel_subscribers(channel_id)
    return api_response(subscribers, "Subscribers fetched successfully")


@subscriptions_router.get("/u/{subscriber_id}", response_model=ApiResponse[List[OwnerSummary]])
async def get_subscribed_channels(
    subscriber_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    channels = await ViewService(db).subscribed_channels(subscriber_id)
    return api_response(channels, "Subscribed channels fetched successfully")
