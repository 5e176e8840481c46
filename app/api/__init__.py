from fastapi import APIRouter
from app.api import channels, comments, dashboard, likes, playlists, subscriptions, users, videos

api_router = APIRouter()

api_router.include_router(users.users_router, prefix="/users", tags=["users"])
api_router.include_router(videos.videos_router, prefix="/videos", tags=["videos"])
api_router.include_router(comments.comments_router, prefix="/comments", tags=["comments"])
api_router.include_router(likes.likes_router, prefix="/likes", tags=["likes"])
api_router.include_router(playlists.playlists_router, prefix="/playlists", tags=["playlists"])
api_router.include_router(subscriptions.subscriptions_router, prefix="/subscriptions", tags=["subscriptions"])
api_router.include_router(channels.channels_router, prefix="/channels", tags=["channels"])
api_router.include_router(dashboard.dashboard_router, prefix="/dashboard", tags=["dashboard"])

__all__ = ["api_router"]
