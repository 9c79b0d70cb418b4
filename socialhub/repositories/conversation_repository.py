from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from socialhub.database.sequences import next_id
from socialhub.models.conversation import ConversationDocument


def pair_key(user_a: int, user_b: int) -> str:
    lo, hi = sorted((user_a, user_b))
    return f"{lo}:{hi}"


def active_participant_ids(conversation: ConversationDocument) -> List[int]:
    return [p["user_id"] for p in conversation.get("participants", []) if p.get("left_at") is None]


class ConversationRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["conversations"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("participants.user_id", ASCENDING)])
        await self.collection.create_index([("last_activity", DESCENDING)])
        await self.collection.create_index([("pair_key", ASCENDING)], unique=True, sparse=True)

    async def create(self, participant_ids: Sequence[int], is_group: bool = False, name: Optional[str] = None) -> ConversationDocument:
        now = datetime.now(timezone.utc)
        unique_ids = list(dict.fromkeys(participant_ids))
        doc: Dict[str, Any] = {
            "_id": await next_id(self._db, "conversations"),
            "is_group": is_group,
            "name": name,
            "participants": [{"user_id": uid, "joined_at": now, "left_at": None} for uid in unique_ids],
            "last_message_id": None,
            "last_activity": now,
            "created_at": now,
        }
        if not is_group:
            doc["pair_key"] = pair_key(unique_ids[0], unique_ids[1])
        await self.collection.insert_one(doc)
        return doc

    async def get(self, conversation_id: int) -> Optional[ConversationDocument]:
        return await self.collection.find_one({"_id": conversation_id})

    async def find_one_to_one(self, user_a: int, user_b: int) -> Optional[ConversationDocument]:
        return await self.collection.find_one({"is_group": False, "pair_key": pair_key(user_a, user_b)})

    async def get_or_create_one_to_one(self, user_a: int, user_b: int) -> ConversationDocument:
        existing = await self.find_one_to_one(user_a, user_b)
        if existing:
            return existing
        try:
            return await self.create([user_a, user_b])
        except DuplicateKeyError:
            # lost the race against a concurrent create for the same pair
            return await self.find_one_to_one(user_a, user_b)

    async def update_on_new_message(self, conversation_id: int, message_id: int, sent_at: datetime) -> None:
        await self.collection.update_one(
            {"_id": conversation_id},
            {"$set": {"last_message_id": message_id, "last_activity": sent_at}},
        )

    async def mark_left(self, conversation_id: int, user_id: int) -> bool:
        convo = await self.get(conversation_id)
        if not convo or user_id not in active_participant_ids(convo):
            return False
        now = datetime.now(timezone.utc)
        participants = [
            {**p, "left_at": now} if p["user_id"] == user_id and p.get("left_at") is None else p
            for p in convo["participants"]
        ]
        result = await self.collection.update_one({"_id": conversation_id}, {"$set": {"participants": participants}})
        return bool(result.modified_count)

    async def list_for_user(self, user_id: int, limit: int = 50) -> List[ConversationDocument]:
        query = {"participants": {"$elemMatch": {"user_id": user_id, "left_at": None}}}
        cursor = self.collection.find(query).sort([("last_activity", DESCENDING), ("_id", DESCENDING)]).limit(limit)
        return await cursor.to_list(length=limit)
