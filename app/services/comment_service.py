from typing import Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.models.comments import Comment
from app.models.users import Users
from app.services.video_service import VideoService
from app.utils.validation import require_text


class CommentService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_comment(self, comment_id: UUID) -> Comment:
        result = await self.db.execute(select(Comment).where(Comment.id == comment_id))
        comment = result.scalar_one_or_none()
        if comment is None:
            raise NotFoundError("Comment with the given ID not found")
        return comment

    async def _get_owned_comment(self, comment_id: UUID, user: Users) -> Comment:
        comment = await self.get_comment(comment_id)
        if comment.owner_id != user.id:
            logger.warning(f"User {user.id} tried to modify comment {comment_id}")
            raise PermissionDeniedError("Only the owner can modify this comment")
        return comment

    async def add(self, video_id: UUID, user: Users, content: Optional[str]) -> Comment:
        content = require_text(content, "Content of the comment is required")
        await VideoService(self.db).get_visible_video(video_id, user.id)

        comment = Comment(owner_id=user.id, video_id=video_id, content=content)
        self.db.add(comment)
        await self.db.commit()
        await self.db.refresh(comment)

        logger.info(f"User {user.id} commented {comment.id} on video {video_id}")
        return comment

    async def edit(self, comment_id: UUID, user: Users, content: Optional[str]) -> Comment:
        content = require_text(content, "Content of the comment is required")
        comment = await self._get_owned_comment(comment_id, user)
        comment.content = content
        await self.db.commit()
        await self.db.refresh(comment)

        logger.info(f"Edited comment {comment_id}")
        return comment

    async def delete(self, comment_id: UUID, user: Users, video_id: Optional[UUID] = None) -> None:
        comment = await self._get_owned_comment(comment_id, user)
        if video_id is not None and comment.video_id != video_id:
            raise NotFoundError("Comment does not belong to the given video")

        await self.db.delete(comment)
        await self.db.commit()
        logger.info(f"Deleted comment {comment_id}")
