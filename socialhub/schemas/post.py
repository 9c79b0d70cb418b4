from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from socialhub.schemas.common import CamelModel, DocumentModel


class PostCreate(CamelModel):

    content: Optional[str] = Field(default=None, max_length=5000)
    media_url: Optional[str] = None
    media_type: Optional[str] = Field(default=None, max_length=50)

    @model_validator(mode="after")
    def _not_empty(self):
        if not (self.content and self.content.strip()) and not self.media_url:
            raise ValueError("A post needs content or media")
        return self


class PostPublic(DocumentModel):

    user_id: int
    content: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    likes_count: int = 0
    comments_count: int = 0
    shares_count: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None


class CommentCreate(CamelModel):

    content: str = Field(min_length=1, max_length=2000)


class CommentPublic(DocumentModel):

    post_id: int
    user_id: int
    content: str
    likes_count: int = 0
    is_active: bool = True
    created_at: datetime


class LikeResult(CamelModel):

    liked: bool


class FollowResult(CamelModel):

    following: bool


class StoryCreate(CamelModel):

    content: Optional[str] = Field(default=None, max_length=500)
    media_url: Optional[str] = None
    media_type: Optional[str] = Field(default=None, max_length=50)
    background_color: Optional[str] = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")

    @model_validator(mode="after")
    def _not_empty(self):
        if not (self.content and self.content.strip()) and not self.media_url:
            raise ValueError("A story needs content or media")
        return self


class StoryPublic(DocumentModel):

    user_id: int
    content: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    background_color: Optional[str] = None
    views_count: int = 0
    is_active: bool = True
    expires_at: datetime
    created_at: datetime
