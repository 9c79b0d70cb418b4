from datetime import datetime
from typing import Optional, TypedDict


class MessageDocument(TypedDict, total=False):
    _id: int
    conversation_id: int
    sender_id: int
    content: Optional[str]
    media_url: Optional[str]
    media_type: Optional[str]
    # read state is the only mutable part of a message
    is_read: bool
    read_at: Optional[datetime]
    created_at: datetime
