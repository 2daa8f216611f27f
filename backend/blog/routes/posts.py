"""
Blog Backend - Post Route Handlers
===================================

What:  HTTP mapping for posts: search pages, CRUD, likes and the post image.
How:   Query/body parsing by FastAPI and pydantic, one service call per
       handler, one database transaction per request (get_db_session).

Endpoints:
    GET    /api/posts?search=&pageNumber=&pageSize=   → PostListResponse
    GET    /api/posts/{post_id}                       → PostResponse | 404
    POST   /api/posts                                 → 201 PostResponse
    PUT    /api/posts/{post_id}                       → PostResponse | 400 | 404
    DELETE /api/posts/{post_id}                       → 200 (idempotent)
    POST   /api/posts/{post_id}/likes                 → new like count (plain integer)
    PUT    /api/posts/{post_id}/image                 → 200 | 400 | 404
    GET    /api/posts/{post_id}/image                 → image bytes | 404
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, Response, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from blog.config import settings
from blog.database import get_db_session
from blog.schemas.common import ErrorResponse
from blog.schemas.post import (
    CreatePostRequest,
    PostListResponse,
    PostResponse,
    UpdatePostRequest,
)
from blog.services.file_service import file_service
from blog.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Posts"])

NOT_FOUND = {404: {"description": "Post not found", "model": ErrorResponse}}


@router.get(
    "",
    response_model=PostListResponse,
    summary="Search posts, one page at a time",
    description=(
        "`search` starting with `#` matches posts carrying that exact tag; any other "
        "value matches titles containing it (case-insensitive). Newest posts first."
    ),
)
async def list_posts(
    search: str = Query(default="", description="Title substring, or #tag"),
    page_number: int = Query(default=1, ge=1, alias="pageNumber"),
    page_size: int = Query(
        default=settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        alias="pageSize",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> PostListResponse:
    return await post_service.list_posts(
        db, search=search, page_number=page_number, page_size=page_size
    )


@router.get("/{post_id}", response_model=PostResponse, responses=NOT_FOUND)
async def get_post(
    post_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.get_post(db, post_id)


@router.post("", status_code=201, response_model=PostResponse)
async def create_post(
    request: CreatePostRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.create_post(db, request)


@router.put(
    "/{post_id}",
    response_model=PostResponse,
    responses={**NOT_FOUND, 400: {"description": "Body id differs from URL id", "model": ErrorResponse}},
)
async def update_post(
    post_id: int,
    request: UpdatePostRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.update_post(db, post_id, request)


@router.delete("/{post_id}", status_code=200)
async def delete_post(
    post_id: int,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    orphaned_image = await post_service.delete_post(db, post_id)
    if orphaned_image:
        background_tasks.add_task(file_service.cleanup_file, orphaned_image)
    return Response(status_code=200)


@router.post("/{post_id}/likes", response_model=int, responses=NOT_FOUND)
async def like_post(
    post_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> int:
    return await post_service.like_post(db, post_id)


@router.put(
    "/{post_id}/image",
    status_code=200,
    responses={**NOT_FOUND, 400: {"description": "Invalid image", "model": ErrorResponse}},
    summary="Upload or replace the post image",
)
async def upload_image(
    post_id: int,
    background_tasks: BackgroundTasks,
    image: UploadFile = File(..., description="PNG, JPG, JPEG or GIF image"),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    content = await image.read()
    logger.info(
        "Received image for post %d: filename=%s, size=%d bytes",
        post_id,
        image.filename or "unknown",
        len(content),
    )
    try:
        replaced = await post_service.upload_image(
            db,
            post_id,
            filename=image.filename or "upload",
            content=content,
            content_length=image.size,
        )
    finally:
        await image.close()

    if replaced:
        background_tasks.add_task(file_service.cleanup_file, replaced)
    return Response(status_code=200)


@router.get(
    "/{post_id}/image",
    response_class=FileResponse,
    responses={404: {"description": "Post or image not found", "model": ErrorResponse}},
)
async def get_image(
    post_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> FileResponse:
    path = await post_service.get_image_path(db, post_id)
    return FileResponse(
        path=str(path),
        media_type=file_service.media_type(path),
        headers={"Cache-Control": "public, max-age=3600"},
    )
