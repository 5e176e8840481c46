from datetime import datetime
from typing import Optional
from uuid import UUID

from app.schemas.base import CamelModel
from app.schemas.user import OwnerSummary


class VideoResponse(CamelModel):
    id: UUID
    owner_id: UUID
    video_file: str
    thumbnail: str
    title: str
    description: str
    is_published: bool
    views: int
    duration: Optional[float] = None
    created_at: datetime
    updated_at: datetime


class ChannelVideo(CamelModel):
    """A video with its owner projected out."""

    id: UUID
    video_file: str
    thumbnail: str
    title: str
    description: str
    is_published: bool
    views: int
    duration: Optional[float] = None
    created_at: datetime
    updated_at: datetime


class VideoListItem(ChannelVideo):
    owner: Optional[OwnerSummary] = None


class UpdateVideoRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None


class PublishStatusResponse(CamelModel):
    id: UUID
    is_published: bool
