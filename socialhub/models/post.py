from datetime import datetime
from typing import Optional, TypedDict


class PostDocument(TypedDict, total=False):
    _id: int
    user_id: int
    content: Optional[str]
    media_url: Optional[str]
    media_type: Optional[str]
    likes_count: int
    comments_count: int
    shares_count: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CommentDocument(TypedDict, total=False):
    _id: int
    post_id: int
    user_id: int
    content: str
    likes_count: int
    is_active: bool
    created_at: datetime


class LikeDocument(TypedDict, total=False):
    _id: int
    user_id: int
    post_id: Optional[int]
    comment_id: Optional[int]
    created_at: datetime


class FollowDocument(TypedDict, total=False):
    _id: int
    follower_id: int
    following_id: int
    created_at: datetime
