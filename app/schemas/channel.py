from typing import List, Optional
from uuid import UUID

from app.schemas.base import CamelModel
from app.schemas.video import ChannelVideo


class ChannelProfile(CamelModel):
    id: UUID
    fullname: str
    username: str
    subscribers_count: int
    subscribed_channels_count: int
    is_subscribed: bool
    avatar: str
    cover_image: Optional[str] = None
    email: str


class ChannelStats(CamelModel):
    """Dashboard totals for the caller's own channel.

    ``published_videos`` lists every video the caller has uploaded, drafts
    included; the totals are computed over that same list.
    """

    published_videos: List[ChannelVideo] = []
    total_videos: int
    total_video_views: int
    total_likes: int
    subscribers_count: int
    subscribed_to_count: int


class SubscriptionToggleResponse(CamelModel):
    is_subscribed: bool
    subscribers_count: int
