from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.models.users import Users
from app.schemas.base import ApiResponse, Page, api_response
from app.schemas.comment import CommentRequest, CommentResponse, CommentWithOwner
from app.services.comment_service import CommentService
from app.services.view_service import ViewService
from app.utils.security import get_current_user

comments_router = APIRouter()


@comments_router.get("/{video_id}", response_model=ApiResponse[Page[CommentWithOwner]])
async def get_video_comments(
    video_id: UUID,
    page: int = Query(1),
    limit: int = Query(10),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comments = await ViewService(db).video_comments(video_id, current_user.id, page=page, limit=limit)
    return api_response(comments, "Comments fetched successfully")


@comments_router.post("/{video_id}", response_model=ApiResponse[CommentResponse], status_code=status.HTTP_201_CREATED)
async def add_comment(
    video_id: UUID,
    payload: CommentRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await CommentService(db).add(video_id, current_user, payload.content)
    return api_response(CommentResponse.model_validate(comment), "Comment added successfully", status.HTTP_201_CREATED)


@comments_router.patch("/c/{comment_id}", response_model=ApiResponse[CommentResponse])
async def edit_comment(
    comment_id: UUID,
    payload: CommentRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await CommentService(db).edit(comment_id, current_user, payload.content)
    return api_response(CommentResponse.model_validate(comment), "Comment updated successfully")


@comments_router.delete("/c/{comment_id}", response_model=ApiResponse[dict])
async def delete_comment(
    comment_id: UUID,
    video_id: Optional[UUID] = Query(None, alias="videoId"),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CommentService(db).delete(comment_id, current_user, video_id=video_id)
    return api_response({}, "Comment deleted successfully")
