from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from socialhub.database.sequences import next_id
from socialhub.models.post import LikeDocument


class LikeRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db
        self._collection = db.get_collection("likes")

    async def ensure_indexes(self) -> None:
        await self._collection.create_index([("user_id", ASCENDING), ("post_id", ASCENDING), ("comment_id", ASCENDING)], unique=True)

    @staticmethod
    def _target(post_id: Optional[int], comment_id: Optional[int]) -> dict:
        if post_id is not None:
            return {"post_id": post_id}
        return {"comment_id": comment_id}

    async def get_like(self, user_id: int, post_id: Optional[int] = None, comment_id: Optional[int] = None) -> Optional[LikeDocument]:
        return await self._collection.find_one({"user_id": user_id, **self._target(post_id, comment_id)})

    async def create_like(self, user_id: int, post_id: Optional[int] = None, comment_id: Optional[int] = None) -> LikeDocument:
        doc = {
            "_id": await next_id(self._db, "likes"),
            "user_id": user_id,
            "post_id": post_id,
            "comment_id": comment_id,
            "created_at": datetime.now(timezone.utc),
        }
        await self._collection.insert_one(doc)
        return doc

    async def delete_like(self, like_id: int) -> bool:
        result = await self._collection.delete_one({"_id": like_id})
        return result.deleted_count > 0
