from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.user import OwnerSummary


class CommentRequest(CamelModel):
    content: str = Field(default="")


class CommentResponse(CamelModel):
    id: UUID
    owner_id: UUID
    video_id: UUID
    content: str
    created_at: datetime
    updated_at: datetime


class CommentWithOwner(CamelModel):
    id: UUID
    video_id: UUID
    content: str
    created_at: datetime
    updated_at: datetime
    owner: Optional[OwnerSummary] = None
