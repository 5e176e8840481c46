from typing import Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from app.models.users import Users
from app.models.videos import Video
from app.services.storage_service import BlobStorage
from app.services.user_service import UserService
from app.utils.uploads import StagedFile
from app.utils.validation import clean_text, require_text

THUMBNAIL_FOLDER = "thumbnails"
VIDEO_FOLDER = "videos"


class VideoService:
    def __init__(self, db: AsyncSession, storage: Optional[BlobStorage] = None):
        self.db = db
        self.storage = storage

    async def get_video(self, video_id: UUID) -> Video:
        result = await self.db.execute(select(Video).where(Video.id == video_id))
        video = result.scalar_one_or_none()
        if video is None:
            raise NotFoundError("Video with the given ID not found")
        return video

    async def get_visible_video(self, video_id: UUID, viewer_id: UUID) -> Video:
        """Like ``get_video``, but an unpublished video exists only for its owner."""
        video = await self.get_video(video_id)
        if not video.is_published and video.owner_id != viewer_id:
            raise NotFoundError("Video with the given ID not found")
        return video

    async def get_owned_video(self, video_id: UUID, user: Users) -> Video:
        video = await self.get_video(video_id)
        if video.owner_id != user.id:
            logger.warning(f"User {user.id} tried to modify video {video_id} owned by {video.owner_id}")
            raise PermissionDeniedError("Only the owner can modify this video")
        return video

    async def publish(
        self,
        user: Users,
        title: Optional[str],
        description: Optional[str],
        thumbnail: Optional[StagedFile],
        video_file: Optional[StagedFile],
        duration: Optional[float] = None,
    ) -> Video:
        title = require_text(title, "Video title is required")
        description = require_text(description, "Video description is required")
        if thumbnail is None:
            raise ValidationError("Video thumbnail must be provided")
        if video_file is None:
            raise ValidationError("Video file must be provided")
        if duration is not None and duration < 0:
            raise ValidationError("Duration cannot be negative")

        thumbnail_blob = await self.storage.upload(thumbnail.path, THUMBNAIL_FOLDER, thumbnail.content_type)
        try:
            video_blob = await self.storage.upload(video_file.path, VIDEO_FOLDER, video_file.content_type)
        except Exception:
            logger.warning(f"Orphaned upload after failed video upload: {thumbnail_blob.url}")
            raise

        video = Video(
            owner_id=user.id,
            title=title,
            description=description,
            thumbnail=thumbnail_blob.url,
            video_file=video_blob.url,
            duration=duration,
        )
        self.db.add(video)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.warning(f"Orphaned uploads after failed video write: {thumbnail_blob.url}, {video_blob.url}")
            raise
        await self.db.refresh(video)

        logger.info(f"User {user.id} published video {video.id}")
        return video

    async def get_for_viewer(self, video_id: UUID, viewer: Users) -> Video:
        """Fetch a video, count the view and put it at the front of the viewer's history."""
        video = await self.get_visible_video(video_id, viewer.id)

        await self.db.execute(
            update(Video).where(Video.id == video_id).values(views=Video.views + 1)
        )
        await UserService(self.db).record_watch(viewer.id, video_id)
        await self.db.refresh(video)
        return video

    async def update_details(
        self,
        video_id: UUID,
        user: Users,
        title: Optional[str],
        description: Optional[str],
    ) -> Video:
        title = clean_text(title)
        description = clean_text(description)
        if not title and not description:
            raise ValidationError("Title or description is required")

        video = await self.get_owned_video(video_id, user)
        if title:
            video.title = title
        if description:
            video.description = description
        await self.db.commit()
        await self.db.refresh(video)

        logger.info(f"Updated details of video {video_id}")
        return video

    async def update_thumbnail(
        self, video_id: UUID, user: Users, thumbnail: Optional[StagedFile]
    ) -> Video:
        if thumbnail is None:
            raise ValidationError("Video thumbnail must be provided")

        video = await self.get_owned_video(video_id, user)
        blob = await self.storage.upload(thumbnail.path, THUMBNAIL_FOLDER, thumbnail.content_type)
        video.thumbnail = blob.url
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.warning(f"Orphaned upload after failed thumbnail write: {blob.url}")
            raise
        await self.db.refresh(video)

        logger.info(f"Updated thumbnail of video {video_id}")
        return video

    async def delete(self, video_id: UUID, user: Users) -> None:
        # comments, likes and playlist entries of the video are left in place
        video = await self.get_owned_video(video_id, user)
        await self.db.delete(video)
        await self.db.commit()
        logger.info(f"Deleted video {video_id}")

    async def toggle_publish(self, video_id: UUID, user: Users) -> Video:
        video = await self.get_owned_video(video_id, user)
        video.is_published = not video.is_published
        await self.db.commit()
        await self.db.refresh(video)

        logger.info(f"Video {video_id} is_published={video.is_published}")
        return video
