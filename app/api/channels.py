from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.models.users import Users
from app.schemas.base import ApiResponse, api_response
from app.schemas.channel import ChannelProfile
from app.services.view_service import ViewService
from app.utils.security import get_current_user

channels_router = APIRouter()


@channels_router.get("/{username}", response_model=ApiResponse[ChannelProfile])
async def get_channel_profile(
    username: str,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await ViewService(db).channel_profile(username, current_user.id)
    return api_response(profile, "Channel details fetched successfully")
