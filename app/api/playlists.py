from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.models.users import Users
from app.schemas.base import ApiResponse, api_response
from app.schemas.playlist import PlaylistDetail, PlaylistRequest, PlaylistResponse, PlaylistSummary
from app.schemas.video import VideoListItem
from app.services.playlist_service import PlaylistService
from app.services.view_service import ViewService
from app.utils.security import get_current_user

playlists_router = APIRouter()


@playlists_router.post("/", response_model=ApiResponse[PlaylistResponse], status_code=status.HTTP_201_CREATED)
async def create_playlist(
    payload: PlaylistRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    playlist = await PlaylistService(db).create(current_user, payload.title, payload.description)
    return api_response(PlaylistResponse.model_validate(playlist), "Playlist created successfully", status.HTTP_201_CREATED)


@playlists_router.get("/user/{user_id}", response_model=ApiResponse[List[PlaylistSummary]])
async def get_user_playlists(
    user_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    playlists = await ViewService(db).user_playlists(user_id)
    return api_response(playlists, "Playlists fetched successfully")


@playlists_router.get("/{playlist_id}", response_model=ApiResponse[PlaylistDetail])
async def get_playlist_by_id(
    playlist_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    playlist = await ViewService(db).playlist_with_contents(playlist_id, current_user.id)
    return api_response(playlist, "Playlist fetched successfully")


@playlists_router.get("/{playlist_id}/videos", response_model=ApiResponse[List[VideoListItem]])
async def get_videos_in_playlist(
    playlist_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await PlaylistService(db).get_playlist(playlist_id)
    videos = await ViewService(db).playlist_videos(playlist_id, current_user.id)
    return api_response(videos, "Playlist videos fetched successfully")


@playlists_router.patch("/{playlist_id}", response_model=ApiResponse[PlaylistResponse])
async def update_playlist(
    playlist_id: UUID,
    payload: PlaylistRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    playlist = await PlaylistService(db).update(playlist_id, current_user, payload.title, payload.description)
    return api_response(PlaylistResponse.model_validate(playlist), "Playlist updated successfully")


@playlists_router.delete("/{playlist_id}", response_model=ApiResponse[dict])
async def delete_playlist(
    playlist_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await PlaylistService(db).delete(playlist_id, current_user)
    return api_response({}, "Playlist deleted successfully")


@playlists_router.patch("/{playlist_id}/add/{video_id}", response_model=ApiResponse[PlaylistDetail])
async def add_video_to_playlist(
    playlist_id: UUID,
    video_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await PlaylistService(db).add_video(playlist_id, video_id, current_user)
    playlist = await ViewService(db).playlist_with_contents(playlist_id, current_user.id)
    return api_response(playlist, "Video added to playlist")


@playlists_router.patch("/{playlist_id}/remove/{video_id}", response_model=ApiResponse[PlaylistDetail])
async def remove_video_from_playlist(
    playlist_id: UUID,
    video_id: UUID,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await PlaylistService(db).remove_video(playlist_id, video_id, current_user)
    playlist = await ViewService(db).playlist_with_contents(playlist_id, current_user.id)
    return api_response(playlist, "Video removed from playlist")
