import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from socialhub.database.sequences import next_id
from socialhub.models.post import CommentDocument, PostDocument


class PostRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["posts"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
        await self.collection.create_index([("created_at", DESCENDING)])

    async def create_post(self, user_id: int, content: Optional[str], media_url: Optional[str], media_type: Optional[str]) -> PostDocument:
        now = datetime.now(timezone.utc)
        doc: Dict[str, Any] = {
            "_id": await next_id(self._db, "posts"),
            "user_id": user_id,
            "content": content,
            "media_url": media_url,
            "media_type": media_type,
            "likes_count": 0,
            "comments_count": 0,
            "shares_count": 0,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        await self.collection.insert_one(doc)
        return doc

    async def get_post(self, post_id: int) -> Optional[PostDocument]:
        return await self.collection.find_one({"_id": post_id, "is_active": True})

    async def list_active(self, limit: int = 20, offset: int = 0, user_id: Optional[int] = None) -> List[PostDocument]:
        query: Dict[str, Any] = {"is_active": True}
        if user_id is not None:
            query["user_id"] = user_id
        cursor = self.collection.find(query).sort([("created_at", DESCENDING), ("_id", DESCENDING)]).skip(offset).limit(limit)
        return await cursor.to_list(length=limit)

    async def deactivate(self, post_id: int) -> bool:
        result = await self.collection.update_one(
            {"_id": post_id, "is_active": True},
            {"$set": {"is_active": False, "updated_at": datetime.now(timezone.utc)}},
        )
        return bool(result.modified_count)

    async def increment(self, post_id: int, field: str, delta: int) -> None:
        await self.collection.update_one(
            {"_id": post_id},
            {"$inc": {field: delta}, "$set": {"updated_at": datetime.now(timezone.utc)}},
        )

    async def search(self, query: str, limit: int = 20) -> List[PostDocument]:
        cursor = (
            self.collection.find({"is_active": True, "content": {"$regex": re.escape(query), "$options": "i"}})
            .sort("created_at", DESCENDING)
            .limit(limit)
        )
        return await cursor.to_list(length=limit)


class CommentRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["comments"]

    async def create_comment(self, post_id: int, user_id: int, content: str) -> CommentDocument:
        doc: Dict[str, Any] = {
            "_id": await next_id(self._db, "comments"),
            "post_id": post_id,
            "user_id": user_id,
            "content": content,
            "likes_count": 0,
            "is_active": True,
            "created_at": datetime.now(timezone.utc),
        }
        await self.collection.insert_one(doc)
        return doc

    async def get_comment(self, comment_id: int) -> Optional[CommentDocument]:
        return await self.collection.find_one({"_id": comment_id, "is_active": True})

    async def list_for_post(self, post_id: int, limit: int = 500) -> List[CommentDocument]:
        cursor = self.collection.find({"post_id": post_id, "is_active": True}).sort([("created_at", ASCENDING), ("_id", ASCENDING)]).limit(limit)
        return await cursor.to_list(length=limit)

    async def increment(self, comment_id: int, field: str, delta: int) -> None:
        await self.collection.update_one({"_id": comment_id}, {"$inc": {field: delta}})
