from datetime import datetime
from typing import List, Optional

from pydantic import Field, model_validator

from socialhub.schemas.common import CamelModel, DocumentModel


class ConversationCreate(CamelModel):
    """Either `participantId` (one-on-one) or `participantIds` (+ optional `name`) for a group."""

    participant_id: Optional[int] = None
    participant_ids: Optional[List[int]] = None
    name: Optional[str] = Field(default=None, max_length=100)

    @model_validator(mode="after")
    def _one_shape(self):
        if (self.participant_id is None) == (not self.participant_ids):
            raise ValueError("Provide participantId or participantIds")
        return self


class ParticipantPublic(CamelModel):

    user_id: int
    joined_at: datetime
    left_at: Optional[datetime] = None


class ConversationPublic(DocumentModel):

    is_group: bool = False
    name: Optional[str] = None
    participants: List[ParticipantPublic] = []
    last_message_id: Optional[int] = None
    last_activity: datetime
    created_at: datetime


class MessageCreate(CamelModel):

    conversation_id: int
    content: Optional[str] = Field(default=None, max_length=5000)
    media_url: Optional[str] = None
    media_type: Optional[str] = Field(default=None, max_length=50)


class MessagePublic(DocumentModel):

    conversation_id: int
    sender_id: int
    content: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    is_read: bool = False
    read_at: Optional[datetime] = None
    created_at: datetime


class ReadResult(CamelModel):

    updated: int
