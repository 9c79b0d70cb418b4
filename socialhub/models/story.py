from datetime import datetime
from typing import Optional, TypedDict


class StoryDocument(TypedDict, total=False):
    _id: int
    user_id: int
    content: Optional[str]
    media_url: Optional[str]
    media_type: Optional[str]
    background_color: Optional[str]
    views_count: int
    is_active: bool
    expires_at: datetime
    created_at: datetime


class StoryViewDocument(TypedDict, total=False):
    _id: int
    story_id: int
    viewer_id: int
    viewed_at: datetime
