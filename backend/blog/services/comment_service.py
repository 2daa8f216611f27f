"""
Blog Backend - Comment Service
===============================

What:  Thin validation layer over the CommentStore.
Who:   Called by the comment route handlers.

Rules:
    - update_comment() checks the comment exists (and, when a post id is
      given, belongs to that post) before any store mutation; otherwise it
      raises NotFoundError.
    - delete_comment() delegates directly; deleting an absent comment is
      not an error.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from blog.exceptions import NotFoundError, ValidationError
from blog.models.comment import Comment
from blog.schemas.comment import CreateCommentRequest, UpdateCommentRequest
from blog.services.db_errors import translate_db_errors
from blog.stores.base import CommentStore
from blog.stores.comment_store import comment_store as default_comment_store

logger = logging.getLogger(__name__)


class CommentService:

    def __init__(self, store: Optional[CommentStore] = None):
        self.store = store or default_comment_store

    async def get_comments_by_post_id(self, db: AsyncSession, post_id: int) -> List[Comment]:
        with translate_db_errors("list_comments", "Could not retrieve comments.", post_id=post_id):
            return await self.store.find_by_post_id(db, post_id)

    async def get_comment_by_id(self, db: AsyncSession, comment_id: int) -> Optional[Comment]:
        with translate_db_errors("get_comment", "Could not retrieve the comment.", comment_id=comment_id):
            return await self.store.find_by_id(db, comment_id)

    async def create_comment(self, db: AsyncSession, request: CreateCommentRequest) -> Comment:
        if request.post_id is None:
            raise ValidationError(message="postId is required", field="postId")

        comment = Comment(post_id=request.post_id, text=request.text)
        with translate_db_errors("create_comment", "Could not create the comment."):
            return await self.store.create(db, comment)

    async def update_comment(
        self,
        db: AsyncSession,
        comment_id: int,
        request: UpdateCommentRequest,
        post_id: Optional[int] = None,
    ) -> Comment:
        """
        Replace the text of an existing comment.

        Raises:
            NotFoundError: No such comment, or it belongs to another post.
                The store's update() is not called in that case.
        """
        with translate_db_errors("update_comment", "Could not update the comment.", comment_id=comment_id):
            existing = await self.store.find_by_id(db, comment_id)
            if existing is None or (post_id is not None and existing.post_id != post_id):
                logger.info("Update rejected: comment %d not found", comment_id)
                raise NotFoundError(resource="comment", resource_id=comment_id)

            comment = Comment(id=comment_id, post_id=existing.post_id, text=request.text)
            return await self.store.update(db, comment)

    async def delete_comment(self, db: AsyncSession, comment_id: int) -> None:
        with translate_db_errors("delete_comment", "Could not delete the comment.", comment_id=comment_id):
            await self.store.delete(db, comment_id)


comment_service = CommentService()
