from datetime import datetime
from typing import List, Optional, TypedDict


class ParticipantDocument(TypedDict, total=False):
    user_id: int
    joined_at: datetime
    left_at: Optional[datetime]


class ConversationDocument(TypedDict, total=False):
    _id: int
    is_group: bool
    name: Optional[str]
    # "lo:hi" user ids, only set for one-on-one conversations
    pair_key: Optional[str]
    participants: List[ParticipantDocument]
    last_message_id: Optional[int]
    last_activity: datetime
    created_at: datetime
