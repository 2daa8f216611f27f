"""
Blog Backend - Post Service
============================

What:  Orchestrates post operations for the API: search pages, CRUD, likes
       and post images.
How:   Delegates persistence to a PostStore, converts PostRecord values into
       PostResponse models, turns missing posts into NotFoundError and
       SQLAlchemy failures into DatabaseError.
Who:   Called by the post and comment route handlers.

Page Metadata (GET /api/posts):
    total     = get_total_count(search)
    last_page = max(1, ceil(total / page_size))
    has_prev  = page_number > 1
    has_next  = page_number < last_page

Post Images:
    Files are written before the post row points at them. Old files (the
    replaced image, or the image of a deleted post) are only removed after
    the response, by a background task the route schedules with the path
    this service returns.
"""

import logging
import math
from pathlib import Path
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from blog.exceptions import NotFoundError, ValidationError
from blog.schemas.post import (
    CreatePostRequest,
    PostListResponse,
    PostResponse,
    UpdatePostRequest,
)
from blog.services.db_errors import translate_db_errors
from blog.services.file_service import FileService, file_service as default_file_service
from blog.stores.base import PostRecord, PostStore
from blog.stores.post_store import post_store as default_post_store

logger = logging.getLogger(__name__)


def to_post_response(record: PostRecord) -> PostResponse:
    return PostResponse(
        id=record.id,
        title=record.title,
        text=record.text,
        likes_count=record.likes_count,
        comments_count=record.comments_count,
        tags=list(record.tags),
    )


class PostService:
    """
    Business logic layer for posts.

    Stateless apart from its collaborators; the AsyncSession comes in with
    every call.
    """

    def __init__(
        self,
        store: Optional[PostStore] = None,
        files: Optional[FileService] = None,
    ):
        self.store = store or default_post_store
        self.files = files or default_file_service

    async def list_posts(
        self,
        db: AsyncSession,
        search: str = "",
        page_number: int = 1,
        page_size: int = 10,
    ) -> PostListResponse:
        with translate_db_errors("list_posts", "Could not retrieve posts. Please try again."):
            total = await self.store.get_total_count(db, search)
            records = await self.store.find_all(db, search, page_number, page_size)

        last_page = max(1, math.ceil(total / page_size))
        logger.debug(
            "Search %r page %d/%d: %d of %d post(s)",
            search, page_number, last_page, len(records), total,
        )
        return PostListResponse(
            posts=[to_post_response(record) for record in records],
            has_prev=page_number > 1,
            has_next=page_number < last_page,
            last_page=last_page,
        )

    async def get_post(self, db: AsyncSession, post_id: int) -> PostResponse:
        """
        Raises:
            NotFoundError: Post does not exist (→ 404)
            DatabaseError: Query failed (→ 500)
        """
        return to_post_response(await self._require_post(db, post_id))

    async def ensure_post_exists(self, db: AsyncSession, post_id: int) -> None:
        await self._require_post(db, post_id)

    async def create_post(self, db: AsyncSession, request: CreatePostRequest) -> PostResponse:
        with translate_db_errors("create_post", "Could not create the post. Please try again."):
            record = await self.store.create(db, request.title, request.text, request.tags)
        return to_post_response(record)

    async def update_post(
        self, db: AsyncSession, post_id: int, request: UpdatePostRequest
    ) -> PostResponse:
        """
        Full replace of title, text and tags.

        Raises:
            ValidationError: Body id differs from the path id (→ 400)
            NotFoundError: Post does not exist (→ 404)
        """
        if request.id is not None and request.id != post_id:
            raise ValidationError(
                message=f"Post id in body ({request.id}) does not match URL ({post_id})",
                field="id",
            )

        with translate_db_errors(
            "update_post", "Could not update the post. Please try again.", post_id=post_id
        ):
            record = await self.store.update(
                db,
                PostRecord(id=post_id, title=request.title, text=request.text, tags=request.tags),
            )
        return to_post_response(record)

    async def delete_post(self, db: AsyncSession, post_id: int) -> Optional[str]:
        """
        Delete a post; deleting an absent post is not an error.

        Returns:
            Absolute path of the post's image, for the caller to clean up,
            or None.
        """
        with translate_db_errors(
            "delete_post", "Could not delete the post. Please try again.", post_id=post_id
        ):
            record = await self.store.find_by_id(db, post_id)
            deleted = await self.store.delete(db, post_id)

        if deleted and record is not None and record.image_path:
            return str(self.files.resolve(record.image_path))
        return None

    async def like_post(self, db: AsyncSession, post_id: int) -> int:
        with translate_db_errors(
            "like_post", "Could not like the post. Please try again.", post_id=post_id
        ):
            return await self.store.increment_likes(db, post_id)

    async def upload_image(
        self,
        db: AsyncSession,
        post_id: int,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Optional[str]:
        """
        Validate and store a new image for the post.

        Returns:
            Absolute path of the replaced image, or None if there was none.
        """
        await self._require_post(db, post_id)

        absolute_path, relative_path = await self.files.validate_and_store(
            filename=filename,
            content=content,
            content_length=content_length,
        )
        try:
            with translate_db_errors(
                "upload_image", "Could not save the post image. Please try again.", post_id=post_id
            ):
                previous = await self.store.set_image(db, post_id, relative_path)
        except Exception:
            await self.files.cleanup_file(absolute_path)
            raise

        logger.info("Post %d image set to %s", post_id, relative_path)
        if previous:
            return str(self.files.resolve(previous))
        return None

    async def get_image_path(self, db: AsyncSession, post_id: int) -> Path:
        """
        Raises:
            NotFoundError: Post absent, post has no image, or the file is missing.
        """
        record = await self._require_post(db, post_id)
        if not record.image_path:
            raise NotFoundError(resource="image", resource_id=post_id)

        path = self.files.resolve(record.image_path)
        if not path.exists():
            logger.warning("Post %d references missing image %s", post_id, record.image_path)
            raise NotFoundError(resource="image", resource_id=post_id)
        return path

    async def _require_post(self, db: AsyncSession, post_id: int) -> PostRecord:
        with translate_db_errors(
            "get_post", "Could not retrieve the post. Please try again.", post_id=post_id
        ):
            record = await self.store.find_by_id(db, post_id)
        if record is None:
            raise NotFoundError(resource="post", resource_id=post_id)
        return record


post_service = PostService()
