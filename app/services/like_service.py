from typing import Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.likes import Like
from app.services.comment_service import CommentService
from app.services.video_service import VideoService


class LikeService:
    """Like toggles as a conditional delete followed by an insert.

    The unique constraints on ``(liked_by_id, video_id)`` and
    ``(liked_by_id, comment_id)`` keep at most one row per pair even when two
    toggles race; the loser of an insert race ends up "liked".
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _toggle(self, user_id: UUID, target_field: str, target_id: UUID) -> bool:
        target_column = getattr(Like, target_field)
        result = await self.db.execute(
            delete(Like).where(Like.liked_by_id == user_id, target_column == target_id)
        )
        if result.rowcount:
            await self.db.commit()
            logger.info(f"User {user_id} unliked {target_field}={target_id}")
            return False

        self.db.add(Like(liked_by_id=user_id, **{target_field: target_id}))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info(f"Concurrent like already recorded for user {user_id} {target_field}={target_id}")
            return True

        logger.info(f"User {user_id} liked {target_field}={target_id}")
        return True

    async def count(self, target_field: str, target_id: UUID) -> int:
        target_column = getattr(Like, target_field)
        result = await self.db.execute(select(func.count(Like.id)).where(target_column == target_id))
        return int(result.scalar_one() or 0)

    async def toggle_video_like(self, user_id: UUID, video_id: UUID) -> Tuple[bool, int]:
        await VideoService(self.db).get_visible_video(video_id, user_id)
        is_liked = await self._toggle(user_id, "video_id", video_id)
        return is_liked, await self.count("video_id", video_id)

    async def toggle_comment_like(self, user_id: UUID, comment_id: UUID) -> Tuple[bool, int]:
        await CommentService(self.db).get_comment(comment_id)
        is_liked = await self._toggle(user_id, "comment_id", comment_id)
        return is_liked, await self.count("comment_id", comment_id)
