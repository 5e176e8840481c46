from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import AppSettings, get_app_settings
from app.db.database import get_db
from app.models.users import Users
from app.schemas.base import ApiResponse, Page, api_response
from app.schemas.video import PublishStatusResponse, UpdateVideoRequest, VideoListItem, VideoResponse
from app.services.storage_service import BlobStorage, get_blob_storage
from app.services.video_service import VideoService
from app.services.view_service import ViewService
from app.utils.security import get_current_user
from app.utils.uploads import staged_upload

videos_router = APIRouter()


@videos_router.get("/", response_model=ApiResponse[Page[VideoListItem]])
async def list_videos(
    page: int = Query(1),
    limit: int = Query(10),
    query: Optional[str] = Query(None),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_type: str = Query("desc", alias="sortType"),
    user_id: Optional[UUID] = Query(None, alias="userId"),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    videos = await ViewService(db).list_videos(
        page=page,
        limit=limit,
        query=query,
        owner_id=user_id,
        sort_by=sort_by,
        sort_type=sort_type,
    )
    return api_response(videos, "Videos fetched successfully")


@videos_router.post("/", response_model=ApiResponse[VideoResponse], status_code=status.HTTP_201_CREATED)
async def publish_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    duration: Optional[float] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    settings: AppSettings = Depends(get_app_settings),
):
    max_bytes = settings.max_upload_mb * 1024 * 1024
    async with staged_upload(thumbnail, settings.upload_temp_dir, max_bytes) as thumbnail_file:
        async with staged_upload(video_file, settings.upload_temp_dir, max_bytes) as staged_video:
            video = await VideoService(db, storage=storage).publish(
                current_user,
                title=title,
                description=description,
                thumbnail=thumbnail_file,
                video_file=staged_video,
                duration=duration,
            )
    return api_response(VideoResponse.model_validate(video), "New video published successfully", status.HTTP_201_CREATED)


@videos_router.get("/{video_id}", response_model=ApiResponse[VideoResponse])
async def get_video_by_id(
    video_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    video = await VideoService(db).get_for_viewer(video_id, current_user)
    return api_response(VideoResponse.model_validate(video), "Video fetched successfully")


@videos_router.patch("/{video_id}", response_model=ApiResponse[VideoResponse])
async def update_video_details(
    video_id: UUID,
    payload: UpdateVideoRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    video = await VideoService(db).update_details(video_id, current_user, payload.title, payload.description)
    return api_response(VideoResponse.model_validate(video), "Video details updated successfully")


@videos_router.patch("/{video_id}/thumbnail", response_model=ApiResponse[VideoResponse])
async def update_video_thumbnail(
    video_id: UUID,
    thumbnail: Optional[UploadFile] = File(None),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    settings: AppSettings = Depends(get_app_settings),
):
    max_bytes = settings.max_upload_mb * 1024 * 1024
    async with staged_upload(thumbnail, settings.upload_temp_dir, max_bytes) as thumbnail_file:
        video = await VideoService(db, storage=storage).update_thumbnail(video_id, current_user, thumbnail_file)
    return api_response(VideoResponse.model_validate(video), "Video thumbnail updated successfully")


@videos_router.delete("/{video_id}", response_model=ApiResponse[dict])
async def delete_video(
    video_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await VideoService(db).delete(video_id, current_user)
    return api_response({}, "Video deleted successfully")


@videos_router.patch("/{video_id}/toggle-publish", response_model=ApiResponse[PublishStatusResponse])
async def toggle_publish_status(
    video_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    video = await VideoService(db).toggle_publish(video_id, current_user)
    return api_response(
        PublishStatusResponse(id=video.id, is_published=video.is_published),
        "Video publish status toggled successfully",
    )
