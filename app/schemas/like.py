from datetime import datetime
from typing import Optional
from uuid import UUID

from app.schemas.base import CamelModel
from app.schemas.user import OwnerSummary


class LikeToggleResponse(CamelModel):
    is_liked: bool
    likes_count: int


class LikedVideo(CamelModel):
    id: UUID
    thumbnail: str
    title: str
    video_file: str
    owner: Optional[OwnerSummary] = None


class LikedVideoEntry(CamelModel):
    id: UUID
    liked_at: datetime
    video: LikedVideo
