from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.token import Token


class UserResponse(CamelModel):
    """Public view of a user; never carries the password hash or refresh token."""

    id: UUID
    username: str
    email: str
    fullname: str
    avatar: str
    cover_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OwnerSummary(CamelModel):
    id: UUID
    username: str
    fullname: str
    avatar: str


class LoginRequest(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: str = Field(..., min_length=1)


class LoginResponse(Token):
    user: UserResponse


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class UpdateAccountRequest(CamelModel):
    fullname: Optional[str] = None
    email: Optional[str] = None


class WatchedVideo(CamelModel):
    id: UUID
    title: str
    thumbnail: str
    video_file: str
    duration: Optional[float] = None
    views: int
    owner: Optional[OwnerSummary] = None


class WatchHistoryResponse(CamelModel):
    id: UUID
    username: str
    fullname: str
    email: str
    watch_history: List[WatchedVideo] = Field(default_factory=list)
