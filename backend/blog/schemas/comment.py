"""
Blog Backend - Comment Request/Response Schemas
================================================

Comment JSON: {"id": 7, "postId": 1, "text": "Nice post"}
"""

from typing import Optional

from pydantic import Field

from blog.schemas.common import CamelModel


class CommentResponse(CamelModel):
    id: int
    post_id: int
    text: str


class CreateCommentRequest(CamelModel):
    """postId is filled from the URL by the comment routes when omitted."""
    text: str = Field(min_length=1)
    post_id: Optional[int] = None


class UpdateCommentRequest(CamelModel):
    id: Optional[int] = None
    text: str = Field(min_length=1)
    post_id: Optional[int] = None
