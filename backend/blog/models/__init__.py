"""
ORM models. Importing this package registers every table on Base.metadata,
which Alembic's env.py and the test fixtures rely on.
"""

from blog.models.comment import Comment
from blog.models.post import Post, post_tags
from blog.models.tag import Tag

__all__ = ["Comment", "Post", "Tag", "post_tags"]
