from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from socialhub.database.sequences import next_id
from socialhub.models.story import StoryDocument


STORY_LIFETIME = timedelta(hours=24)


def _utc_naive(value: datetime) -> datetime:
    # dates come back from the store as naive UTC; compare like with like
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class StoryRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["stories"]

    @property
    def views(self):
        return self._db["story_views"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("is_active", ASCENDING), ("expires_at", ASCENDING)])
        await self.views.create_index([("story_id", ASCENDING), ("viewer_id", ASCENDING)], unique=True)

    async def create_story(
        self,
        user_id: int,
        content: Optional[str],
        media_url: Optional[str],
        media_type: Optional[str],
        background_color: Optional[str],
    ) -> StoryDocument:
        now = datetime.now(timezone.utc)
        doc: Dict[str, Any] = {
            "_id": await next_id(self._db, "stories"),
            "user_id": user_id,
            "content": content,
            "media_url": media_url,
            "media_type": media_type,
            "background_color": background_color,
            "views_count": 0,
            "is_active": True,
            "expires_at": now + STORY_LIFETIME,
            "created_at": now,
        }
        await self.collection.insert_one(doc)
        return doc

    async def get_active(self, story_id: int, now: Optional[datetime] = None) -> Optional[StoryDocument]:
        now = _utc_naive(now or datetime.now(timezone.utc))
        return await self.collection.find_one({"_id": story_id, "is_active": True, "expires_at": {"$gt": now}})

    async def list_active(self, now: Optional[datetime] = None, limit: int = 200) -> List[StoryDocument]:
        now = _utc_naive(now or datetime.now(timezone.utc))
        cursor = (
            self.collection.find({"is_active": True, "expires_at": {"$gt": now}})
            .sort([("created_at", DESCENDING), ("_id", DESCENDING)])
            .limit(limit)
        )
        return await cursor.to_list(length=limit)

    async def deactivate_expired(self, now: Optional[datetime] = None) -> int:
        now = _utc_naive(now or datetime.now(timezone.utc))
        result = await self.collection.update_many(
            {"is_active": True, "expires_at": {"$lte": now}},
            {"$set": {"is_active": False}},
        )
        return result.modified_count or 0

    async def record_view(self, story_id: int, viewer_id: int) -> bool:
        """Store one view per (story, viewer); returns False when it was already recorded."""
        if await self.views.find_one({"story_id": story_id, "viewer_id": viewer_id}):
            return False
        try:
            await self.views.insert_one(
                {
                    "_id": await next_id(self._db, "story_views"),
                    "story_id": story_id,
                    "viewer_id": viewer_id,
                    "viewed_at": datetime.now(timezone.utc),
                }
            )
        except DuplicateKeyError:
            return False
        await self.collection.update_one({"_id": story_id}, {"$inc": {"views_count": 1}})
        return True
