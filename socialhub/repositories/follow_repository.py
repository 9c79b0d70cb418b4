from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from socialhub.database.sequences import next_id
from socialhub.models.post import FollowDocument


class FollowRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db
        self._collection = db.get_collection("follows")

    async def ensure_indexes(self) -> None:
        await self._collection.create_index([("follower_id", ASCENDING), ("following_id", ASCENDING)], unique=True)
        await self._collection.create_index([("following_id", ASCENDING)])

    async def get_follow(self, follower_id: int, following_id: int) -> Optional[FollowDocument]:
        return await self._collection.find_one({"follower_id": follower_id, "following_id": following_id})

    async def create_follow(self, follower_id: int, following_id: int) -> FollowDocument:
        doc = {
            "_id": await next_id(self._db, "follows"),
            "follower_id": follower_id,
            "following_id": following_id,
            "created_at": datetime.now(timezone.utc),
        }
        await self._collection.insert_one(doc)
        return doc

    async def delete_follow(self, follow_id: int) -> bool:
        result = await self._collection.delete_one({"_id": follow_id})
        return result.deleted_count > 0

    async def list_follower_ids(self, user_id: int, limit: int = 500) -> List[int]:
        cursor = self._collection.find({"following_id": user_id}).sort("created_at", -1).limit(limit)
        return [doc["follower_id"] async for doc in cursor]

    async def list_following_ids(self, user_id: int, limit: int = 500) -> List[int]:
        cursor = self._collection.find({"follower_id": user_id}).sort("created_at", -1).limit(limit)
        return [doc["following_id"] async for doc in cursor]
