from datetime import datetime
from typing import List, Optional
from uuid import UUID

from app.schemas.base import CamelModel
from app.schemas.user import OwnerSummary
from app.schemas.video import VideoListItem


class PlaylistRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None


class PlaylistResponse(CamelModel):
    id: UUID
    owner_id: UUID
    title: str
    description: str
    created_at: datetime
    updated_at: datetime


class PlaylistSummary(PlaylistResponse):
    total_videos: int = 0


class PlaylistDetail(CamelModel):
    id: UUID
    title: str
    description: str
    created_at: datetime
    updated_at: datetime
    owner: Optional[OwnerSummary] = None
    videos: List[VideoListItem] = []
