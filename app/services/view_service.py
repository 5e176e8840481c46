"""Read-only composite views assembled from several tables at query time.

Every related lookup is a left outer join. A missing owner is returned as
``owner = None``; rows whose primary target is gone (a liked or watched video
that was deleted) are dropped from list views, and so are videos the caller
may not see (unpublished and owned by someone else).
"""

import math
from typing import Any, Dict, List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.core.exceptions import NotFoundError, ValidationError
from app.models.comments import Comment
from app.models.likes import Like
from app.models.playlists import Playlist, PlaylistVideo
from app.models.subscriptions import Subscription
from app.models.users import Users
from app.models.videos import Video
from app.models.watch_history import WatchHistoryEntry
from app.schemas.base import Page
from app.schemas.channel import ChannelProfile, ChannelStats
from app.schemas.comment import CommentWithOwner
from app.schemas.like import LikedVideo, LikedVideoEntry
from app.schemas.playlist import PlaylistDetail, PlaylistSummary
from app.schemas.user import OwnerSummary, WatchedVideo, WatchHistoryResponse
from app.schemas.video import ChannelVideo, VideoListItem

MAX_PAGE_SIZE = 100

VIDEO_SORT_FIELDS = {
    "createdAt": Video.created_at,
    "views": Video.views,
    "title": Video.title,
    "duration": Video.duration,
}


def _owner_columns(owner) -> List[Any]:
    return [
        owner.id.label("owner_id"),
        owner.username.label("owner_username"),
        owner.fullname.label("owner_fullname"),
        owner.avatar.label("owner_avatar"),
    ]


def _owner_from_row(row: Dict[str, Any]) -> Optional[OwnerSummary]:
    if row.get("owner_id") is None:
        return None
    return OwnerSummary(
        id=row["owner_id"],
        username=row["owner_username"],
        fullname=row["owner_fullname"],
        avatar=row["owner_avatar"],
    )


def _video_item(video: Video, row: Dict[str, Any]) -> VideoListItem:
    item = VideoListItem.model_validate(video)
    item.owner = _owner_from_row(row)
    return item


def _visible_to(viewer_id: UUID):
    return or_(Video.is_published.is_(True), Video.owner_id == viewer_id)


def _check_page(page: int, limit: int) -> None:
    if page < 1:
        raise ValidationError("Page must be a positive integer")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")


def _total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


class ViewService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _require_user(self, user_id: UUID) -> Users:
        result = await self.db.execute(select(Users).where(Users.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError("User does not exist")
        return user

    async def _require_video(self, video_id: UUID, viewer_id: UUID) -> None:
        result = await self.db.execute(
            select(Video.id).where(Video.id == video_id, _visible_to(viewer_id))
        )
        if result.first() is None:
            raise NotFoundError("Video with the given ID not found")

    @staticmethod
    def _subscriber_count(user_column):
        return (
            select(func.count(Subscription.id))
            .where(Subscription.channel_id == user_column)
            .correlate(Users)
            .scalar_subquery()
        )

    @staticmethod
    def _subscribed_to_count(user_column):
        return (
            select(func.count(Subscription.id))
            .where(Subscription.subscriber_id == user_column)
            .correlate(Users)
            .scalar_subquery()
        )

    async def channel_profile(self, username: Optional[str], caller_id: UUID) -> ChannelProfile:
        username = (username or "").strip().lower()
        if not username:
            raise ValidationError("Username is missing")

        is_subscribed = (
            exists()
            .where(Subscription.channel_id == Users.id, Subscription.subscriber_id == caller_id)
            .correlate(Users)
        )
        stmt = select(
            Users.id,
            Users.fullname,
            Users.username,
            self._subscriber_count(Users.id).label("subscribers_count"),
            self._subscribed_to_count(Users.id).label("subscribed_channels_count"),
            is_subscribed.label("is_subscribed"),
            Users.avatar,
            Users.cover_image,
            Users.email,
        ).where(Users.username == username)

        row = (await self.db.execute(stmt)).mappings().first()
        if row is None:
            raise NotFoundError("Channel doesn't exist")

        logger.debug(f"Channel profile for {username}: {row['subscribers_count']} subscribers")
        return ChannelProfile.model_validate(dict(row))

    async def channel_stats(self, caller_id: UUID) -> ChannelStats:
        stmt = select(
            self._subscriber_count(Users.id).label("subscribers_count"),
            self._subscribed_to_count(Users.id).label("subscribed_to_count"),
        ).where(Users.id == caller_id)
        counts = (await self.db.execute(stmt)).mappings().first()
        if counts is None:
            raise NotFoundError("Channel stats could not be fetched | User does not exist")

        videos = await self.channel_videos(caller_id)
        total_views = sum(video.views for video in videos)

        likes_result = await self.db.execute(
            select(func.count(Like.id))
            .select_from(Like)
            .join(Video, Video.id == Like.video_id)
            .where(Video.owner_id == caller_id)
        )

        return ChannelStats(
            published_videos=videos,
            total_videos=len(videos),
            total_video_views=total_views,
            total_likes=int(likes_result.scalar_one() or 0),
            subscribers_count=counts["subscribers_count"],
            subscribed_to_count=counts["subscribed_to_count"],
        )

    async def channel_videos(self, owner_id: UUID) -> List[ChannelVideo]:
        result = await self.db.execute(
            select(Video).where(Video.owner_id == owner_id).order_by(Video.created_at.desc(), Video.id)
        )
        return [ChannelVideo.model_validate(video) for video in result.scalars().all()]

    async def liked_videos(self, caller_id: UUID) -> List[LikedVideoEntry]:
        owner = aliased(Users)
        stmt = (
            select(
                Like.id.label("like_id"),
                Like.created_at.label("liked_at"),
                Video.id.label("video_id"),
                Video.thumbnail,
                Video.title,
                Video.video_file,
                *_owner_columns(owner),
            )
            .select_from(Like)
            .join(Video, Video.id == Like.video_id)
            .outerjoin(owner, owner.id == Video.owner_id)
            .where(
                Like.liked_by_id == caller_id,
                Like.video_id.is_not(None),
                _visible_to(caller_id),
            )
            .order_by(Like.created_at, Like.id)
        )
        rows = (await self.db.execute(stmt)).mappings().all()

        return [
            LikedVideoEntry(
                id=row["like_id"],
                liked_at=row["liked_at"],
                video=LikedVideo(
                    id=row["video_id"],
                    thumbnail=row["thumbnail"],
                    title=row["title"],
                    video_file=row["video_file"],
                    owner=_owner_from_row(row),
                ),
            )
            for row in rows
        ]

    async def watch_history(self, caller_id: UUID) -> WatchHistoryResponse:
        user = await self._require_user(caller_id)

        owner = aliased(Users)
        stmt = (
            select(
                Video.id,
                Video.title,
                Video.thumbnail,
                Video.video_file,
                Video.duration,
                Video.views,
                *_owner_columns(owner),
            )
            .select_from(WatchHistoryEntry)
            .join(Video, Video.id == WatchHistoryEntry.video_id)
            .outerjoin(owner, owner.id == Video.owner_id)
            .where(WatchHistoryEntry.user_id == caller_id, _visible_to(caller_id))
            .order_by(WatchHistoryEntry.watched_at.desc(), WatchHistoryEntry.id.desc())
        )
        rows = (await self.db.execute(stmt)).mappings().all()

        history = [
            WatchedVideo(
                id=row["id"],
                title=row["title"],
                thumbnail=row["thumbnail"],
                video_file=row["video_file"],
                duration=row["duration"],
                views=row["views"],
                owner=_owner_from_row(row),
            )
            for row in rows
        ]
        return WatchHistoryResponse(
            id=user.id,
            username=user.username,
            fullname=user.fullname,
            email=user.email,
            watch_history=history,
        )

    async def playlist_videos(self, playlist_id: UUID, viewer_id: UUID) -> List[VideoListItem]:
        owner = aliased(Users)
        stmt = (
            select(Video, *_owner_columns(owner))
            .select_from(PlaylistVideo)
            .join(Video, Video.id == PlaylistVideo.video_id)
            .outerjoin(owner, owner.id == Video.owner_id)
            .where(PlaylistVideo.playlist_id == playlist_id, _visible_to(viewer_id))
            .order_by(PlaylistVideo.position, PlaylistVideo.id)
        )
        rows = (await self.db.execute(stmt)).all()
        return [_video_item(row.Video, row._mapping) for row in rows]

    async def playlist_with_contents(self, playlist_id: UUID, viewer_id: UUID) -> PlaylistDetail:
        owner = aliased(Users)
        stmt = (
            select(Playlist, *_owner_columns(owner))
            .outerjoin(owner, owner.id == Playlist.owner_id)
            .where(Playlist.id == playlist_id)
        )
        row = (await self.db.execute(stmt)).first()
        if row is None:
            raise NotFoundError("Playlist with the given ID not found")

        playlist = row.Playlist
        return PlaylistDetail(
            id=playlist.id,
            title=playlist.title,
            description=playlist.description,
            created_at=playlist.created_at,
            updated_at=playlist.updated_at,
            owner=_owner_from_row(row._mapping),
            videos=await self.playlist_videos(playlist.id, viewer_id),
        )

    async def user_playlists(self, owner_id: UUID) -> List[PlaylistSummary]:
        await self._require_user(owner_id)
        stmt = (
            select(Playlist, func.count(PlaylistVideo.id).label("total_videos"))
            .outerjoin(PlaylistVideo, PlaylistVideo.playlist_id == Playlist.id)
            .where(Playlist.owner_id == owner_id)
            .group_by(Playlist.id)
            .order_by(Playlist.created_at.desc(), Playlist.id)
        )
        rows = (await self.db.execute(stmt)).all()

        summaries = []
        for row in rows:
            summary = PlaylistSummary.model_validate(row.Playlist)
            summary.total_videos = row.total_videos
            summaries.append(summary)
        return summaries

    async def video_comments(
        self, video_id: UUID, viewer_id: UUID, page: int = 1, limit: int = 10
    ) -> Page[CommentWithOwner]:
        _check_page(page, limit)
        await self._require_video(video_id, viewer_id)

        total = (
            await self.db.execute(select(func.count(Comment.id)).where(Comment.video_id == video_id))
        ).scalar_one()

        owner = aliased(Users)
        stmt = (
            select(Comment, *_owner_columns(owner))
            .outerjoin(owner, owner.id == Comment.owner_id)
            .where(Comment.video_id == video_id)
            .order_by(Comment.created_at.desc(), Comment.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).all()

        docs = []
        for row in rows:
            comment = CommentWithOwner.model_validate(row.Comment)
            comment.owner = _owner_from_row(row._mapping)
            docs.append(comment)

        return Page[CommentWithOwner](
            docs=docs,
            total_docs=total,
            page=page,
            limit=limit,
            total_pages=_total_pages(total, limit),
        )

    async def list_videos(
        self,
        page: int = 1,
        limit: int = 10,
        query: Optional[str] = None,
        owner_id: Optional[UUID] = None,
        sort_by: str = "createdAt",
        sort_type: str = "desc",
    ) -> Page[VideoListItem]:
        _check_page(page, limit)
        sort_column = VIDEO_SORT_FIELDS.get(sort_by)
        if sort_column is None:
            raise ValidationError(f"Cannot sort by {sort_by}")
        if sort_type not in ("asc", "desc"):
            raise ValidationError("Sort type must be 'asc' or 'desc'")

        conditions = [Video.is_published.is_(True)]
        if owner_id is not None:
            conditions.append(Video.owner_id == owner_id)
        query = (query or "").strip()
        if query:
            pattern = f"%{query}%"
            conditions.append(or_(Video.title.ilike(pattern), Video.description.ilike(pattern)))

        total = (await self.db.execute(select(func.count(Video.id)).where(*conditions))).scalar_one()

        order = sort_column.asc() if sort_type == "asc" else sort_column.desc()
        owner = aliased(Users)
        stmt = (
            select(Video, *_owner_columns(owner))
            .outerjoin(owner, owner.id == Video.owner_id)
            .where(*conditions)
            .order_by(order, Video.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).all()
        logger.debug(f"Listed {len(rows)} of {total} videos (query={query!r}, owner={owner_id})")

        return Page[VideoListItem](
            docs=[_video_item(row.Video, row._mapping) for row in rows],
            total_docs=total,
            page=page,
            limit=limit,
            total_pages=_total_pages(total, limit),
        )

    async def channel_subscribers(self, channel_id: UUID) -> List[OwnerSummary]:
        await self._require_user(channel_id)
        stmt = (
            select(Users.id, Users.username, Users.fullname, Users.avatar)
            .join(Subscription, Subscription.subscriber_id == Users.id)
            .where(Subscription.channel_id == channel_id)
            .order_by(Subscription.created_at.desc(), Subscription.id)
        )
        rows = (await self.db.execute(stmt)).mappings().all()
        return [OwnerSummary.model_validate(dict(row)) for row in rows]

    async def subscribed_channels(self, subscriber_id: UUID) -> List[OwnerSummary]:
        await self._require_user(subscriber_id)
        stmt = (
            select(Users.id, Users.username, Users.fullname, Users.avatar)
            .join(Subscription, Subscription.channel_id == Users.id)
            .where(Subscription.subscriber_id == subscriber_id)
            .order_by(Subscription.created_at.desc(), Subscription.id)
        )
        rows = (await self.db.execute(stmt)).mappings().all()
        return [OwnerSummary.model_validate(dict(row)) for row in rows]
