"""
Blog Backend - Post SQLAlchemy Model
=====================================

What:  ORM model for the `posts` table and the `post_tags` association table.
How:   Posts carry no ORM relationships; the post store loads tags and
       comment counts with explicit batched queries so nothing lazy-loads
       inside an async session.

Table Design:
    - Integer autoincrement id: listing orders by id DESC (newest first)
    - likes_count: only ever changed by an in-database increment,
      guarded by a CHECK constraint
    - comments_count is NOT a column; it is counted at read time
    - image_path: relative path under STORAGE_ROOT, NULL when no image

post_tags:
    Plain Core table (no mapped class). Rows are deleted and reinserted
    wholesale on every post update, which a Core table does without
    identity-map bookkeeping. `position` preserves submission order.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    text as sql_text,
)
from sqlalchemy.orm import Mapped, mapped_column

from blog.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


post_tags = Table(
    "post_tags",
    Base.metadata,
    Column(
        "post_id",
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Integer,
        ForeignKey("tags.id"),
        primary_key=True,
    ),
    Column(
        "position",
        Integer,
        nullable=False,
        default=0,
        server_default=sql_text("0"),
        comment="Order in which the tag was submitted for this post",
    ),
    Index("idx_post_tags_tag_id", "tag_id"),
)


class Post(Base):
    """
    A blog entry.

    Lifecycle:
        1. Created with likes_count = 0 and its tag associations
        2. Updated as a full replace of title, text and tags
        3. Liked any number of times (likes_count only grows)
        4. Deleted together with its comments and tag associations
    """

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    text: Mapped[str] = mapped_column(Text, nullable=False, default="")

    likes_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=sql_text("0"),
    )

    image_path: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        comment="Relative path from storage root to the post image",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint("likes_count >= 0", name="ck_posts_likes_count_non_negative"),
        # Deleted ids are never handed out again on SQLite either
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, title='{self.title}', likes_count={self.likes_count})>"
