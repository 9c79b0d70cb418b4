from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from socialhub.database.sequences import next_id
from socialhub.models.message import MessageDocument


class MessageRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["messages"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("conversation_id", ASCENDING), ("created_at", ASCENDING)])

    async def save_message(
        self,
        conversation_id: int,
        sender_id: int,
        content: Optional[str],
        media_url: Optional[str] = None,
        media_type: Optional[str] = None,
    ) -> MessageDocument:
        doc: Dict[str, Any] = {
            "_id": await next_id(self._db, "messages"),
            "conversation_id": conversation_id,
            "sender_id": sender_id,
            "content": content,
            "media_url": media_url,
            "media_type": media_type,
            "is_read": False,
            "read_at": None,
            "created_at": datetime.now(timezone.utc),
        }
        await self.collection.insert_one(doc)
        # read back so callers see the stored form (millisecond, naive-UTC timestamps)
        return await self.get(doc["_id"])

    async def get(self, message_id: int) -> Optional[MessageDocument]:
        return await self.collection.find_one({"_id": message_id})

    async def delete(self, message_id: int) -> bool:
        result = await self.collection.delete_one({"_id": message_id})
        return result.deleted_count > 0

    async def get_messages_by_conversation(self, conversation_id: int, limit: int = 200, offset: int = 0) -> List[MessageDocument]:
        cursor = (
            self.collection.find({"conversation_id": conversation_id})
            .sort([("created_at", ASCENDING), ("_id", ASCENDING)])
            .skip(offset)
            .limit(limit)
        )
        return await cursor.to_list(length=limit)

    async def mark_read(self, conversation_id: int, reader_id: int) -> int:
        result = await self.collection.update_many(
            {"conversation_id": conversation_id, "sender_id": {"$ne": reader_id}, "is_read": False},
            {"$set": {"is_read": True, "read_at": datetime.now(timezone.utc)}},
        )
        return result.modified_count or 0
