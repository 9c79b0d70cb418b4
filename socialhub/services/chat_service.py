import logging
from typing import List, Optional, Sequence

from pymongo.errors import PyMongoError

from socialhub.errors import ForbiddenError, InvalidRequestError, NotFoundError
from socialhub.models.conversation import ConversationDocument
from socialhub.models.message import MessageDocument
from socialhub.repositories.conversation_repository import ConversationRepository, active_participant_ids
from socialhub.repositories.message_repository import MessageRepository
from socialhub.repositories.user_repository import UserRepository


logger = logging.getLogger(__name__)


class ChatService:

    def __init__(
        self,
        message_repo: MessageRepository,
        conversation_repo: ConversationRepository,
        user_repo: Optional[UserRepository] = None,
    ) -> None:
        self._message_repo = message_repo
        self._conversation_repo = conversation_repo
        self._user_repo = user_repo

    async def send_message(
        self,
        sender_id: int,
        conversation_id: int,
        content: Optional[str],
        media_url: Optional[str] = None,
        media_type: Optional[str] = None,
    ) -> MessageDocument:
        """Persist a message from an active participant and bump the conversation's last activity."""
        text = content.strip() if content else None
        if not text and not media_url:
            raise InvalidRequestError("Message content cannot be empty")
        convo = await self._conversation_repo.get(conversation_id)
        if not convo:
            raise NotFoundError("Conversation not found")
        if sender_id not in active_participant_ids(convo):
            raise ForbiddenError("Not a participant of this conversation")
        saved = await self._message_repo.save_message(
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=text,
            media_url=media_url,
            media_type=media_type,
        )
        try:
            await self._conversation_repo.update_on_new_message(conversation_id, saved["_id"], saved["created_at"])
        except PyMongoError:
            # a failed send leaves no stored message
            await self._message_repo.delete(saved["_id"])
            raise
        logger.debug("Message %s stored in conversation %s", saved["_id"], conversation_id)
        return saved

    async def participant_ids(self, conversation_id: int) -> List[int]:
        convo = await self._conversation_repo.get(conversation_id)
        return active_participant_ids(convo) if convo else []

    async def get_conversation_for(self, conversation_id: int, user_id: int) -> ConversationDocument:
        convo = await self._conversation_repo.get(conversation_id)
        if not convo:
            raise NotFoundError("Conversation not found")
        # former participants keep read access to the history they were part of
        if all(p["user_id"] != user_id for p in convo.get("participants", [])):
            raise ForbiddenError("Not a participant of this conversation")
        return convo

    async def get_history(self, conversation_id: int, user_id: int, limit: int = 200, offset: int = 0) -> List[MessageDocument]:
        await self.get_conversation_for(conversation_id, user_id)
        return await self._message_repo.get_messages_by_conversation(conversation_id, limit=limit, offset=offset)

    async def list_conversations(self, user_id: int, limit: int = 50) -> List[ConversationDocument]:
        return await self._conversation_repo.list_for_user(user_id, limit=limit)

    async def _require_users(self, user_ids: Sequence[int]) -> None:
        if self._user_repo is None:
            return
        found = await self._user_repo.get_summaries(user_ids)
        if len(found) != len(set(user_ids)):
            raise NotFoundError("User not found")

    async def start_conversation(self, user_id: int, participant_id: int) -> ConversationDocument:
        if participant_id == user_id:
            raise InvalidRequestError("Cannot start a conversation with yourself")
        await self._require_users([participant_id])
        return await self._conversation_repo.get_or_create_one_to_one(user_id, participant_id)

    async def create_group(self, user_id: int, participant_ids: Sequence[int], name: Optional[str] = None) -> ConversationDocument:
        others = [uid for uid in dict.fromkeys(participant_ids) if uid != user_id]
        if not others:
            raise InvalidRequestError("A group needs at least one other participant")
        await self._require_users(others)
        return await self._conversation_repo.create([user_id, *others], is_group=True, name=name)

    async def mark_read(self, conversation_id: int, user_id: int) -> int:
        await self.get_conversation_for(conversation_id, user_id)
        return await self._message_repo.mark_read(conversation_id, user_id)

    async def leave(self, conversation_id: int, user_id: int) -> None:
        convo = await self.get_conversation_for(conversation_id, user_id)
        if not convo.get("is_group"):
            raise InvalidRequestError("Cannot leave a one-on-one conversation")
        if not await self._conversation_repo.mark_left(conversation_id, user_id):
            raise InvalidRequestError("Already left this conversation")
