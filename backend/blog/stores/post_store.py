"""
Blog Backend - SQL Post Store
==============================

What:  Persists posts and their tag links; implements search, pagination,
       comment-count aggregation and the atomic like counter.
How:   SQLAlchemy 2.x async queries against `posts`, `post_tags`, `tags`
       and `comments`. Reads come back as PostRecord values.
Who:   Used by PostService.

Search Rule:
    "#java"  → posts linked to the tag named exactly "java"
    "Java"   → posts whose title contains "java", case-insensitively;
               LIKE wildcards in the term are matched literally
    ""       → all posts
    The term is trimmed, and so is the tag name after "#": " Java " is a
    title search for "Java", "# java" a tag search for "java".
    Results are ordered by id DESC. Page p (1-based) of size n covers
    rows [(p-1)*n, p*n) of the filtered set.

Query Plan (one page):
    1. SELECT posts WHERE <filter> ORDER BY id DESC LIMIT n OFFSET (p-1)*n
    2. SELECT post_id, tag name FROM post_tags JOIN tags WHERE post_id IN (...)
    3. SELECT post_id, COUNT(*) FROM comments WHERE post_id IN (...) GROUP BY post_id
    Three queries per page regardless of page size.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from blog.exceptions import NotFoundError, ValidationError
from blog.models.comment import Comment
from blog.models.post import Post, post_tags
from blog.models.tag import Tag
from blog.stores.base import PostRecord, PostStore, TagStore
from blog.stores.tag_store import tag_store as default_tag_store

logger = logging.getLogger(__name__)

TAG_SEARCH_PREFIX = "#"
LIKE_ESCAPE = "\\"


def _escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def search_condition(search: Optional[str]) -> Optional[ColumnElement[bool]]:
    """
    Build the WHERE clause for a search term, or None to match everything.

    Shared by find_all and get_total_count so both always agree.
    """
    term = (search or "").strip()
    if not term:
        return None

    if term.startswith(TAG_SEARCH_PREFIX):
        tag_name = term[len(TAG_SEARCH_PREFIX):].strip()
        return (
            select(post_tags.c.post_id)
            .join(Tag, Tag.id == post_tags.c.tag_id)
            .where(post_tags.c.post_id == Post.id, Tag.name == tag_name)
            .exists()
        )

    return Post.title.ilike(f"%{_escape_like(term)}%", escape=LIKE_ESCAPE)


def normalize_tag_names(tag_names: Optional[Iterable[str]]) -> List[str]:
    """Strip names, drop blanks and duplicates, keep first-seen order."""
    seen = set()
    names: List[str] = []
    for raw in tag_names or []:
        name = raw.strip()
        if name and name not in seen:
            seen.add(name)
            names.append(name)
    return names


class SqlPostStore(PostStore):
    """PostStore backed by the relational database."""

    def __init__(self, tag_store: Optional[TagStore] = None):
        self.tag_store = tag_store or default_tag_store

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(
        self, db: AsyncSession, title: str, text: str, tag_names: List[str]
    ) -> PostRecord:
        post = Post(title=title, text=text, likes_count=0)
        db.add(post)
        await db.flush()  # assigns post.id

        names = await self._link_tags(db, post.id, tag_names)
        logger.info("Post %d created with %d tag(s)", post.id, len(names))
        return self._to_record(post, names, comments_count=0)

    async def update(self, db: AsyncSession, post: PostRecord) -> PostRecord:
        existing = await self._get_post(db, post.id)
        if existing is None:
            raise NotFoundError(resource="post", resource_id=post.id)

        existing.title = post.title
        existing.text = post.text

        # Tag links are replaced wholesale
        await db.execute(delete(post_tags).where(post_tags.c.post_id == post.id))
        names = await self._link_tags(db, post.id, post.tags)
        await db.flush()

        comments_count = await self._count_comments(db, [post.id])
        logger.info("Post %d updated (%d tag(s))", post.id, len(names))
        return self._to_record(existing, names, comments_count.get(post.id, 0))

    async def delete(self, db: AsyncSession, post_id: int) -> bool:
        existing = await self._get_post(db, post_id)
        if existing is None:
            logger.debug("Delete of post %d skipped: already absent", post_id)
            return False

        await db.execute(delete(post_tags).where(post_tags.c.post_id == post_id))
        await db.execute(delete(Comment).where(Comment.post_id == post_id))
        await db.delete(existing)
        await db.flush()
        logger.info("Post %d deleted", post_id)
        return True

    async def increment_likes(self, db: AsyncSession, post_id: int) -> int:
        # Single UPDATE evaluated by the database: concurrent likes never
        # overwrite each other. The row stays locked until commit, so the
        # read below sees this transaction's value.
        result = await db.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(likes_count=Post.likes_count + 1)
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="post", resource_id=post_id)

        likes = await db.execute(select(Post.likes_count).where(Post.id == post_id))
        return likes.scalar_one()

    async def set_image(
        self, db: AsyncSession, post_id: int, image_path: Optional[str]
    ) -> Optional[str]:
        existing = await self._get_post(db, post_id)
        if existing is None:
            raise NotFoundError(resource="post", resource_id=post_id)

        previous = existing.image_path
        existing.image_path = image_path
        await db.flush()
        return previous

    # ── Reads ─────────────────────────────────────────────────────────────

    async def find_by_id(self, db: AsyncSession, post_id: int) -> Optional[PostRecord]:
        post = await self._get_post(db, post_id)
        if post is None:
            return None
        records = await self._hydrate(db, [post])
        return records[0]

    async def find_all(
        self, db: AsyncSession, search: str, page_number: int, page_size: int
    ) -> List[PostRecord]:
        if page_number < 1:
            raise ValidationError(
                message="pageNumber must be 1 or greater", field="pageNumber"
            )
        if page_size < 1:
            raise ValidationError(message="pageSize must be 1 or greater", field="pageSize")

        query = select(Post)
        condition = search_condition(search)
        if condition is not None:
            query = query.where(condition)
        query = (
            query.order_by(Post.id.desc())
            .offset((page_number - 1) * page_size)
            .limit(page_size)
            .execution_options(populate_existing=True)
        )

        result = await db.execute(query)
        return await self._hydrate(db, result.scalars().all())

    async def get_total_count(self, db: AsyncSession, search: str) -> int:
        query = select(func.count(Post.id))
        condition = search_condition(search)
        if condition is not None:
            query = query.where(condition)
        result = await db.execute(query)
        return result.scalar() or 0

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get_post(self, db: AsyncSession, post_id: Optional[int]) -> Optional[Post]:
        if post_id is None:
            return None
        # populate_existing: a Core-level likes increment in the same session
        # must not be hidden behind a stale identity-map copy
        result = await db.execute(
            select(Post).where(Post.id == post_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _link_tags(
        self, db: AsyncSession, post_id: int, tag_names: Optional[Iterable[str]]
    ) -> List[str]:
        names = normalize_tag_names(tag_names)
        rows = []
        for position, name in enumerate(names):
            tag_id = await self.tag_store.ensure(db, name)
            rows.append({"post_id": post_id, "tag_id": tag_id, "position": position})
        if rows:
            await db.execute(insert(post_tags), rows)
        return names

    async def _load_tags(self, db: AsyncSession, post_ids: List[int]) -> Dict[int, List[str]]:
        tags: Dict[int, List[str]] = defaultdict(list)
        if not post_ids:
            return tags
        result = await db.execute(
            select(post_tags.c.post_id, Tag.name)
            .join(Tag, Tag.id == post_tags.c.tag_id)
            .where(post_tags.c.post_id.in_(post_ids))
            .order_by(post_tags.c.post_id, post_tags.c.position)
        )
        for post_id, name in result.all():
            tags[post_id].append(name)
        return tags

    async def _count_comments(self, db: AsyncSession, post_ids: List[int]) -> Dict[int, int]:
        if not post_ids:
            return {}
        result = await db.execute(
            select(Comment.post_id, func.count(Comment.id))
            .where(Comment.post_id.in_(post_ids))
            .group_by(Comment.post_id)
        )
        return {post_id: count for post_id, count in result.all()}

    async def _hydrate(self, db: AsyncSession, posts: Sequence[Post]) -> List[PostRecord]:
        post_ids = [post.id for post in posts]
        tags = await self._load_tags(db, post_ids)
        counts = await self._count_comments(db, post_ids)
        return [
            self._to_record(post, tags.get(post.id, []), counts.get(post.id, 0))
            for post in posts
        ]

    @staticmethod
    def _to_record(post: Post, tags: List[str], comments_count: int) -> PostRecord:
        return PostRecord(
            id=post.id,
            title=post.title,
            text=post.text,
            tags=list(tags),
            likes_count=post.likes_count,
            comments_count=comments_count,
            image_path=post.image_path,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


post_store = SqlPostStore()
