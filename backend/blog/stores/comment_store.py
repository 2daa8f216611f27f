"""
Blog Backend - SQL Comment Store
=================================

What:  CRUD for the `comments` table.
Who:   Used by CommentService; SqlPostStore deletes comments directly when
       their post is deleted.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from blog.exceptions import NotFoundError
from blog.models.comment import Comment
from blog.stores.base import CommentStore

logger = logging.getLogger(__name__)


class SqlCommentStore(CommentStore):

    async def find_by_post_id(self, db: AsyncSession, post_id: int) -> List[Comment]:
        result = await db.execute(
            select(Comment).where(Comment.post_id == post_id).order_by(Comment.id)
        )
        return list(result.scalars().all())

    async def find_by_id(self, db: AsyncSession, comment_id: int) -> Optional[Comment]:
        result = await db.execute(
            select(Comment)
            .where(Comment.id == comment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, comment: Comment) -> Comment:
        db.add(comment)
        await db.flush()
        logger.info("Comment %d created on post %d", comment.id, comment.post_id)
        return comment

    async def update(self, db: AsyncSession, comment: Comment) -> Comment:
        existing = await self.find_by_id(db, comment.id)
        if existing is None:
            raise NotFoundError(resource="comment", resource_id=comment.id)

        existing.text = comment.text
        await db.flush()
        return existing

    async def delete(self, db: AsyncSession, comment_id: int) -> bool:
        result = await db.execute(delete(Comment).where(Comment.id == comment_id))
        deleted = result.rowcount > 0
        if deleted:
            logger.info("Comment %d deleted", comment_id)
        return deleted


comment_store = SqlCommentStore()
