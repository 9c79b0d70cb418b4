import pytest
from pymongo.errors import AutoReconnect

from socialhub.repositories.conversation_repository import ConversationRepository
from socialhub.repositories.follow_repository import FollowRepository
from socialhub.repositories.message_repository import MessageRepository
from socialhub.repositories.user_repository import UserRepository
from socialhub.services.chat_service import ChatService
from socialhub.services.follow_service import FollowService


class StaleConversations(ConversationRepository):

    async def update_on_new_message(self, conversation_id, message_id, sent_at):
        raise AutoReconnect("primary stepped down")


async def test_failed_conversation_update_leaves_no_message(db):
    conversations = StaleConversations(db)
    convo = await conversations.create([1, 2])
    messages = MessageRepository(db)
    service = ChatService(messages, conversations)

    with pytest.raises(AutoReconnect):
        await service.send_message(sender_id=1, conversation_id=convo["_id"], content="hi")

    assert await messages.get_messages_by_conversation(convo["_id"]) == []


async def test_send_message_bumps_conversation(db):
    conversations = ConversationRepository(db)
    convo = await conversations.create([1, 2])
    service = ChatService(MessageRepository(db), conversations)

    saved = await service.send_message(sender_id=2, conversation_id=convo["_id"], content="  hi  ")

    assert saved["content"] == "hi"
    assert (await conversations.get(convo["_id"]))["last_message_id"] == saved["_id"]


class RacingFollows(FollowRepository):
    """Never sees an existing edge, like two toggles that read at the same time."""

    async def get_follow(self, follower_id, following_id):
        return None


async def test_concurrent_follow_counts_once(db):
    users = UserRepository(db)
    alice = await users.create_user("alice", "alice@example.com", "x")
    bob = await users.create_user("bob", "bob@example.com", "x")
    follows = RacingFollows(db)
    await follows.ensure_indexes()
    service = FollowService(follows, users)

    assert await service.toggle_follow(alice["_id"], bob["_id"])
    assert await service.toggle_follow(alice["_id"], bob["_id"])

    assert (await users.get_user_by_id(bob["_id"]))["followers_count"] == 1
    assert (await users.get_user_by_id(alice["_id"]))["following_count"] == 1
    assert await follows.list_follower_ids(bob["_id"]) == [alice["_id"]]
