"""
Blog Backend - Post Request/Response Schemas
=============================================

What:  The API contract for posts.
Who:   Request models are parsed by the post routes; response models are
       built by PostService from PostRecord values.

Post JSON:
    {"id": 1, "title": "...", "text": "...", "likesCount": 0,
     "commentsCount": 0, "tags": ["java", "spring"]}
"""

from typing import List, Optional

from pydantic import Field

from blog.schemas.common import CamelModel


class PostResponse(CamelModel):
    id: int = Field(description="Post identifier")
    title: str
    text: str
    likes_count: int = Field(ge=0, description="Number of likes, starts at 0")
    comments_count: int = Field(ge=0, description="Number of comments at read time")
    tags: List[str] = Field(default_factory=list, description="Tag names in submission order")


class PostListResponse(CamelModel):
    """
    One page of posts plus the navigation flags the frontend paginator needs.

    last_page is at least 1, so an empty result still has one (empty) page.
    """
    posts: List[PostResponse]
    has_prev: bool = Field(description="A page before this one exists")
    has_next: bool = Field(description="A page after this one exists")
    last_page: int = Field(ge=1, description="Number of the last page")


class CreatePostRequest(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    text: str = Field(default="")
    tags: List[str] = Field(default_factory=list)


class UpdatePostRequest(CamelModel):
    """
    Full replacement of a post. `id` is optional in the body; when present
    it must equal the id in the URL.
    """
    id: Optional[int] = None
    title: str = Field(min_length=1, max_length=255)
    text: str = Field(default="")
    tags: List[str] = Field(default_factory=list)
