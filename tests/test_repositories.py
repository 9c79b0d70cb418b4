from datetime import datetime, timedelta, timezone

from socialhub.database.sequences import next_id
from socialhub.repositories.conversation_repository import ConversationRepository, active_participant_ids, pair_key
from socialhub.repositories.message_repository import MessageRepository
from socialhub.repositories.story_repository import StoryRepository
from socialhub.repositories.user_repository import UserRepository


async def test_next_id_counts_per_collection(db):
    assert [await next_id(db, "posts") for _ in range(3)] == [1, 2, 3]
    assert await next_id(db, "users") == 1


def test_pair_key_is_order_independent():
    assert pair_key(5, 2) == pair_key(2, 5) == "2:5"


async def test_one_to_one_conversation_is_reused(db):
    repo = ConversationRepository(db)
    first = await repo.get_or_create_one_to_one(1, 2)
    second = await repo.get_or_create_one_to_one(2, 1)
    assert first["_id"] == second["_id"]
    assert active_participant_ids(second) == [1, 2]


async def test_group_leave_hides_conversation_from_list(db):
    repo = ConversationRepository(db)
    group = await repo.create([1, 2, 3], is_group=True, name="trip")

    assert await repo.mark_left(group["_id"], 2)
    assert not await repo.mark_left(group["_id"], 2)

    stored = await repo.get(group["_id"])
    assert active_participant_ids(stored) == [1, 3]
    assert await repo.list_for_user(2) == []
    assert [c["_id"] for c in await repo.list_for_user(3)] == [group["_id"]]


async def test_conversations_sorted_by_last_activity(db):
    repo = ConversationRepository(db)
    older = await repo.create([1, 2])
    newer = await repo.create([1, 3])
    await repo.update_on_new_message(older["_id"], 10, datetime.now(timezone.utc) + timedelta(minutes=5))

    assert [c["_id"] for c in await repo.list_for_user(1)] == [older["_id"], newer["_id"]]


async def test_messages_in_send_order_and_mark_read(db):
    repo = MessageRepository(db)
    first = await repo.save_message(1, sender_id=1, content="one")
    second = await repo.save_message(1, sender_id=2, content="two")
    await repo.save_message(2, sender_id=1, content="elsewhere")

    history = await repo.get_messages_by_conversation(1)
    assert [m["_id"] for m in history] == [first["_id"], second["_id"]]
    assert history[0] == first

    assert await repo.mark_read(1, reader_id=1) == 1
    history = await repo.get_messages_by_conversation(1)
    assert [m["is_read"] for m in history] == [False, True]


async def test_message_paging(db):
    repo = MessageRepository(db)
    for n in range(5):
        await repo.save_message(1, sender_id=1, content=str(n))
    page = await repo.get_messages_by_conversation(1, limit=2, offset=2)
    assert [m["content"] for m in page] == ["2", "3"]


async def test_story_expiry(db):
    repo = StoryRepository(db)
    story = await repo.create_story(1, "hello", None, None, "#112233")

    assert [s["_id"] for s in await repo.list_active()] == [story["_id"]]

    later = datetime.now(timezone.utc) + timedelta(hours=25)
    assert await repo.list_active(now=later) == []
    assert await repo.get_active(story["_id"], now=later) is None
    assert await repo.deactivate_expired(now=later) == 1
    assert await repo.list_active() == []


async def test_story_view_counted_once(db):
    repo = StoryRepository(db)
    story = await repo.create_story(1, "hello", None, None, None)

    assert await repo.record_view(story["_id"], 2)
    assert not await repo.record_view(story["_id"], 2)
    assert await repo.record_view(story["_id"], 3)
    assert (await repo.get_active(story["_id"]))["views_count"] == 2


async def test_debit_requires_funds(db):
    repo = UserRepository(db)
    user = await repo.create_user("alice", "alice@example.com", "x")

    assert not await repo.debit_balance(user["_id"], 100)
    assert await repo.credit_balance(user["_id"], 250)
    assert await repo.debit_balance(user["_id"], 100)
    assert (await repo.get_user_by_id(user["_id"]))["wallet_balance_cents"] == 150
    assert not await repo.credit_balance(999, 10)


async def test_user_search_escapes_pattern(db):
    repo = UserRepository(db)
    await repo.create_user("alice", "alice@example.com", "x", "Alice A.")
    await repo.create_user("bob", "bob@example.com", "x")

    assert [u["username"] for u in await repo.search("ALI")] == ["alice"]
    assert await repo.search(".*") == []
    assert [u["username"] for u in await repo.search("a.")] == ["alice"]


async def test_summaries_keep_requested_order(db):
    repo = UserRepository(db)
    a = await repo.create_user("alice", "alice@example.com", "x")
    b = await repo.create_user("bob", "bob@example.com", "x")
    summaries = await repo.get_summaries([b["_id"], 42, a["_id"]])
    assert [s["username"] for s in summaries] == ["bob", "alice"]
    assert "hashed_password" not in summaries[0]
