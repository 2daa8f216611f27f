"""
Blog Backend - Tag SQLAlchemy Model
====================================

What:  ORM model for the `tags` table.
How:   One row per distinct tag name. Rows are created lazily by the tag
       store the first time a post references an unseen name and are shared
       by every post carrying that name. Deleting a post never deletes tags.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from blog.database import Base


class Tag(Base):
    """A named label attachable to many posts. Names are case-sensitive and unique."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Tag name, matched exactly (case-sensitive)",
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"
