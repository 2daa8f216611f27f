"""
Blog Backend - SQL Tag Store
=============================

What:  Get-or-create lookup of tag names in the `tags` table.
Who:   Called by SqlPostStore while linking tags to a post.

Concurrency:
    ensure() is select-then-insert, with the insert inside a SAVEPOINT.
    When two requests introduce the same new tag at the same moment, the
    loser's insert hits the unique constraint; only its savepoint is rolled
    back and the row the winner committed is selected instead. The
    surrounding post transaction carries on.
"""

import logging
from typing import Optional, Set

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blog.models.tag import Tag
from blog.stores.base import TagStore

logger = logging.getLogger(__name__)


class SqlTagStore(TagStore):

    async def ensure(self, db: AsyncSession, name: str) -> int:
        tag_id = await self._find_id(db, name)
        if tag_id is not None:
            return tag_id

        tag = Tag(name=name)
        try:
            async with db.begin_nested():
                db.add(tag)
                await db.flush()  # assigns tag.id
        except IntegrityError:
            logger.debug("Tag %r created concurrently, reusing it", name)
            tag_id = await self._find_id(db, name)
            if tag_id is None:
                raise
            return tag_id

        logger.debug("Created tag %r (id=%d)", name, tag.id)
        return tag.id

    async def find_all(self, db: AsyncSession) -> Set[Tag]:
        result = await db.execute(select(Tag).order_by(Tag.id))
        return set(result.scalars().all())

    async def _find_id(self, db: AsyncSession, name: str) -> Optional[int]:
        result = await db.execute(select(Tag.id).where(Tag.name == name))
        return result.scalar_one_or_none()


tag_store = SqlTagStore()
