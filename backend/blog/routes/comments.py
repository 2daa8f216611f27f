"""
Blog Backend - Comment Route Handlers
======================================

Endpoints (all nested under a post):
    GET    /api/posts/{post_id}/comments                → [CommentResponse] | 404
    GET    /api/posts/{post_id}/comments/{comment_id}   → CommentResponse | 404
    POST   /api/posts/{post_id}/comments                → 201 CommentResponse | 404
    PUT    /api/posts/{post_id}/comments/{comment_id}   → CommentResponse | 404
    DELETE /api/posts/{post_id}/comments/{comment_id}   → 200 (idempotent)

The parent post must exist for every call except DELETE. A comment that
belongs to a different post is reported as not found (and left alone by
DELETE).
"""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from blog.database import get_db_session
from blog.exceptions import NotFoundError
from blog.schemas.comment import (
    CommentResponse,
    CreateCommentRequest,
    UpdateCommentRequest,
)
from blog.schemas.common import ErrorResponse
from blog.services.comment_service import comment_service
from blog.services.post_service import post_service

router = APIRouter(prefix="/api/posts/{post_id}/comments", tags=["Comments"])

NOT_FOUND = {404: {"description": "Post or comment not found", "model": ErrorResponse}}


@router.get("", response_model=List[CommentResponse], responses=NOT_FOUND)
async def list_comments(
    post_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentResponse]:
    await post_service.ensure_post_exists(db, post_id)
    comments = await comment_service.get_comments_by_post_id(db, post_id)
    return [CommentResponse.model_validate(comment) for comment in comments]


@router.get("/{comment_id}", response_model=CommentResponse, responses=NOT_FOUND)
async def get_comment(
    post_id: int,
    comment_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    comment = await comment_service.get_comment_by_id(db, comment_id)
    if comment is None or comment.post_id != post_id:
        raise NotFoundError(resource="comment", resource_id=comment_id)
    return CommentResponse.model_validate(comment)


@router.post("", status_code=201, response_model=CommentResponse, responses=NOT_FOUND)
async def create_comment(
    post_id: int,
    request: CreateCommentRequest,
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    await post_service.ensure_post_exists(db, post_id)
    comment = await comment_service.create_comment(
        db, request.model_copy(update={"post_id": post_id})
    )
    return CommentResponse.model_validate(comment)


@router.put("/{comment_id}", response_model=CommentResponse, responses=NOT_FOUND)
async def update_comment(
    post_id: int,
    comment_id: int,
    request: UpdateCommentRequest,
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    await post_service.ensure_post_exists(db, post_id)
    comment = await comment_service.update_comment(db, comment_id, request, post_id=post_id)
    return CommentResponse.model_validate(comment)


@router.delete("/{comment_id}", status_code=200)
async def delete_comment(
    post_id: int,
    comment_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    # Never delete another post's comment through this URL
    comment = await comment_service.get_comment_by_id(db, comment_id)
    if comment is not None and comment.post_id == post_id:
        await comment_service.delete_comment(db, comment_id)
    return Response(status_code=200)
