from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.models.users import Users
from app.schemas.base import ApiResponse, api_response
from app.schemas.like import LikedVideoEntry, LikeToggleResponse
from app.services.like_service import LikeService
from app.services.view_service import ViewService
from app.utils.security import get_current_user

likes_router = APIRouter()


@likes_router.post("/toggle/v/{video_id}", response_model=ApiResponse[LikeToggleResponse])
async def toggle_video_like(
    video_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    is_liked, likes_count = await LikeService(db).toggle_video_like(current_user.id, video_id)
    return api_response(
        LikeToggleResponse(is_liked=is_liked, likes_count=likes_count),
        "Video like toggled successfully",
    )


@likes_router.post("/toggle/c/{comment_id}", response_model=ApiResponse[LikeToggleResponse])
async def toggle_comment_like(
    comment_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    is_liked, likes_count = await LikeService(db).toggle_comment_like(current_user.id, comment_id)
    return api_response(
        LikeToggleResponse(is_liked=is_liked, likes_count=likes_count),
        "Comment like toggled successfully",
    )


@likes_router.get("/videos", response_model=ApiResponse[List[LikedVideoEntry]])
async def get_liked_videos(
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    liked = await ViewService(db).liked_videos(current_user.id)
    return api_response(liked, "Liked videos fetched successfully")
