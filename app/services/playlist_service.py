from typing import Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from app.models.playlists import Playlist, PlaylistVideo
from app.models.users import Users
from app.services.video_service import VideoService
from app.utils.validation import clean_text, require_text


class PlaylistService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_playlist(self, playlist_id: UUID) -> Playlist:
        result = await self.db.execute(select(Playlist).where(Playlist.id == playlist_id))
        playlist = result.scalar_one_or_none()
        if playlist is None:
            raise NotFoundError("Playlist with the given ID not found")
        return playlist

    async def _get_owned_playlist(self, playlist_id: UUID, user: Users) -> Playlist:
        playlist = await self.get_playlist(playlist_id)
        if playlist.owner_id != user.id:
            logger.warning(f"User {user.id} tried to modify playlist {playlist_id}")
            raise PermissionDeniedError("Only the owner can modify this playlist")
        return playlist

    async def _ensure_title_free(self, owner_id: UUID, title: str, exclude_id: Optional[UUID] = None) -> None:
        stmt = select(Playlist.id).where(Playlist.owner_id == owner_id, Playlist.title == title)
        if exclude_id is not None:
            stmt = stmt.where(Playlist.id != exclude_id)
        result = await self.db.execute(stmt)
        if result.first() is not None:
            raise ConflictError("Playlist with same name already exists")

    async def create(self, user: Users, title: Optional[str], description: Optional[str]) -> Playlist:
        title = require_text(title, "Playlist title must be provided")
        await self._ensure_title_free(user.id, title)

        playlist = Playlist(owner_id=user.id, title=title, description=clean_text(description) or "")
        self.db.add(playlist)
        await self.db.commit()
        await self.db.refresh(playlist)

        logger.info(f"User {user.id} created playlist {playlist.id}")
        return playlist

    async def update(
        self,
        playlist_id: UUID,
        user: Users,
        title: Optional[str],
        description: Optional[str],
    ) -> Playlist:
        title = clean_text(title)
        if not title and description is None:
            raise ValidationError("Title or description is required")

        playlist = await self._get_owned_playlist(playlist_id, user)
        if title and title != playlist.title:
            await self._ensure_title_free(user.id, title, exclude_id=playlist.id)
            playlist.title = title
        if description is not None:
            playlist.description = description.strip()
        await self.db.commit()
        await self.db.refresh(playlist)

        logger.info(f"Updated playlist {playlist_id}")
        return playlist

    async def delete(self, playlist_id: UUID, user: Users) -> None:
        playlist = await self._get_owned_playlist(playlist_id, user)
        await self.db.execute(delete(PlaylistVideo).where(PlaylistVideo.playlist_id == playlist.id))
        await self.db.delete(playlist)
        await self.db.commit()
        logger.info(f"Deleted playlist {playlist_id}")

    async def add_video(self, playlist_id: UUID, video_id: UUID, user: Users) -> Playlist:
        playlist = await self._get_owned_playlist(playlist_id, user)
        await VideoService(self.db).get_visible_video(video_id, user.id)

        result = await self.db.execute(
            select(func.max(PlaylistVideo.position)).where(PlaylistVideo.playlist_id == playlist.id)
        )
        last_position = result.scalar_one()
        position = 0 if last_position is None else last_position + 1

        self.db.add(PlaylistVideo(playlist_id=playlist.id, video_id=video_id, position=position))
        await self.db.commit()
        await self.db.refresh(playlist)

        logger.info(f"Added video {video_id} to playlist {playlist_id} at {position}")
        return playlist

    async def remove_video(self, playlist_id: UUID, video_id: UUID, user: Users) -> Playlist:
        playlist = await self._get_owned_playlist(playlist_id, user)

        result = await self.db.execute(
            delete(PlaylistVideo).where(
                PlaylistVideo.playlist_id == playlist.id,
                PlaylistVideo.video_id == video_id,
            )
        )
        if not result.rowcount:
            await self.db.rollback()
            raise NotFoundError("Video is not in the playlist")
        await self.db.commit()
        await self.db.refresh(playlist)

        logger.info(f"Removed {result.rowcount} entries of video {video_id} from playlist {playlist_id}")
        return playlist
