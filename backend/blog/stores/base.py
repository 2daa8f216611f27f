"""
Blog Backend - Abstract Store Interfaces
=========================================

What:  Abstract base classes defining the data-access contracts for tags,
       posts and comments, plus the PostRecord value type posts travel in.
How:   SQL implementations live next to this module (tag_store, post_store,
       comment_store). Services depend on these interfaces, so unit tests
       can hand them `AsyncMock(spec=CommentStore)` doubles.
Who:   Implemented by the Sql*Store classes; consumed by PostService and
       CommentService.

Session Handling:
    Every method takes the request's AsyncSession as its first argument.
    Stores flush but never commit; the request-scoped session dependency owns
    the transaction boundary.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession

from blog.models.comment import Comment
from blog.models.tag import Tag


@dataclass(frozen=True)
class PostRecord:
    """
    A post as read from the store: the row plus its derived fields.

    tags keeps the order the names were submitted in. comments_count is
    counted when the record is read and is never written back.
    """

    id: Optional[int]
    title: str
    text: str
    tags: List[str] = field(default_factory=list)
    likes_count: int = 0
    comments_count: int = 0
    image_path: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TagStore(ABC):
    """Get-or-create mapping from tag names to stable identifiers."""

    @abstractmethod
    async def ensure(self, db: AsyncSession, name: str) -> int:
        """Return the id of the tag named `name`, creating it if unseen."""
        ...

    @abstractmethod
    async def find_all(self, db: AsyncSession) -> Set[Tag]:
        ...


class PostStore(ABC):
    """
    Persistence and search for posts.

    Search rule shared by find_all and get_total_count:
        - "#name": posts carrying the tag `name` (exact match)
        - anything else: case-insensitive substring match on the title
        - empty or blank: every post
    """

    @abstractmethod
    async def create(
        self, db: AsyncSession, title: str, text: str, tag_names: List[str]
    ) -> PostRecord:
        ...

    @abstractmethod
    async def find_by_id(self, db: AsyncSession, post_id: int) -> Optional[PostRecord]:
        ...

    @abstractmethod
    async def find_all(
        self, db: AsyncSession, search: str, page_number: int, page_size: int
    ) -> List[PostRecord]:
        """Page `page_number` (1-based) of matching posts, newest id first."""
        ...

    @abstractmethod
    async def get_total_count(self, db: AsyncSession, search: str) -> int:
        ...

    @abstractmethod
    async def update(self, db: AsyncSession, post: PostRecord) -> PostRecord:
        """
        Replace title, text and tags of an existing post.

        Raises:
            NotFoundError: No post with post.id exists.
        """
        ...

    @abstractmethod
    async def delete(self, db: AsyncSession, post_id: int) -> bool:
        """Delete a post with its comments and tag links. False if it was already gone."""
        ...

    @abstractmethod
    async def increment_likes(self, db: AsyncSession, post_id: int) -> int:
        """
        Add one like in the database and return the new count.

        Raises:
            NotFoundError: No post with post_id exists.
        """
        ...

    @abstractmethod
    async def set_image(
        self, db: AsyncSession, post_id: int, image_path: Optional[str]
    ) -> Optional[str]:
        """Point the post at a new image and return the previous image path."""
        ...


class CommentStore(ABC):
    """Persistence for comments keyed by post."""

    @abstractmethod
    async def find_by_post_id(self, db: AsyncSession, post_id: int) -> List[Comment]:
        ...

    @abstractmethod
    async def find_by_id(self, db: AsyncSession, comment_id: int) -> Optional[Comment]:
        ...

    @abstractmethod
    async def create(self, db: AsyncSession, comment: Comment) -> Comment:
        ...

    @abstractmethod
    async def update(self, db: AsyncSession, comment: Comment) -> Comment:
        """
        Overwrite the text of an existing comment.

        Raises:
            NotFoundError: No comment with comment.id exists.
        """
        ...

    @abstractmethod
    async def delete(self, db: AsyncSession, comment_id: int) -> bool:
        ...
