from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.models.users import Users
from app.schemas.base import ApiResponse, api_response
from app.schemas.channel import ChannelStats
from app.schemas.video import ChannelVideo
from app.services.view_service import ViewService
from app.utils.security import get_current_user

dashboard_router = APIRouter()


@dashboard_router.get("/stats", response_model=ApiResponse[ChannelStats])
async def get_channel_stats(
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    stats = await ViewService(db).channel_stats(current_user.id)
    return api_response(stats, "Channel stats fetched successfully")


@dashboard_router.get("/videos", response_model=ApiResponse[List[ChannelVideo]])
async def get_channel_videos(
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    videos = await ViewService(db).channel_videos(current_user.id)
    return api_response(videos, "Published videos fetched successfully")
