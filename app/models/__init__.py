from app.models.users import Users
from app.models.videos import Video
from app.models.watch_history import WatchHistoryEntry
from app.models.comments import Comment
from app.models.likes import Like
from app.models.playlists import Playlist, PlaylistVideo
from app.models.subscriptions import Subscription

__all__ = [
    "Users",
    "Video",
    "WatchHistoryEntry",
    "Comment",
    "Like",
    "Playlist",
    "PlaylistVideo",
    "Subscription",
]
