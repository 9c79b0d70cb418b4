import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from socialhub.database.sequences import next_id
from socialhub.models.user import UserDocument


SUMMARY_PROJECTION = {"username": 1, "display_name": 1, "avatar": 1, "is_verified": 1}


class UserRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db
        self._collection = db.get_collection("users")

    async def ensure_indexes(self) -> None:
        await self._collection.create_index("username", unique=True)
        await self._collection.create_index("email", unique=True)

    async def create_user(
        self,
        username: str,
        email: str,
        hashed_password: str,
        display_name: Optional[str] = None,
    ) -> UserDocument:
        now = datetime.now(timezone.utc)
        doc: Dict[str, Any] = {
            "_id": await next_id(self._db, "users"),
            "username": username,
            "email": email,
            "hashed_password": hashed_password,
            "display_name": display_name,
            "bio": None,
            "avatar": None,
            "is_verified": False,
            "is_premium": False,
            "premium_expires_at": None,
            "wallet_balance_cents": 0,
            "followers_count": 0,
            "following_count": 0,
            "posts_count": 0,
            "is_active": True,
            "is_banned": False,
            "created_at": now,
            "updated_at": now,
        }
        await self._collection.insert_one(doc)
        return doc

    async def get_user_by_id(self, user_id: int) -> Optional[UserDocument]:
        return await self._collection.find_one({"_id": user_id})

    async def get_user_by_username(self, username: str) -> Optional[UserDocument]:
        return await self._collection.find_one({"username": username})

    async def get_user_by_email(self, email: str) -> Optional[UserDocument]:
        return await self._collection.find_one({"email": email})

    async def update_user(self, user_id: int, updates: Dict[str, Any]) -> Optional[UserDocument]:
        if updates:
            await self._collection.update_one(
                {"_id": user_id},
                {"$set": {**updates, "updated_at": datetime.now(timezone.utc)}},
            )
        return await self.get_user_by_id(user_id)

    async def increment(self, user_id: int, field: str, delta: int) -> None:
        await self._collection.update_one({"_id": user_id}, {"$inc": {field: delta}})

    async def get_summaries(self, user_ids: Iterable[int]) -> List[Dict[str, Any]]:
        ids = list(user_ids)
        if not ids:
            return []
        cursor = self._collection.find({"_id": {"$in": ids}}, SUMMARY_PROJECTION)
        found = {doc["_id"]: doc for doc in await cursor.to_list(length=len(ids))}
        # keep the caller's ordering
        return [found[i] for i in ids if i in found]

    async def search(self, query: str, limit: int = 20) -> List[UserDocument]:
        pattern = {"$regex": re.escape(query), "$options": "i"}
        cursor = self._collection.find(
            {"is_active": True, "$or": [{"username": pattern}, {"display_name": pattern}]}
        ).limit(limit)
        return await cursor.to_list(length=limit)

    async def credit_balance(self, user_id: int, amount_cents: int) -> bool:
        result = await self._collection.update_one(
            {"_id": user_id},
            {"$inc": {"wallet_balance_cents": amount_cents}, "$set": {"updated_at": datetime.now(timezone.utc)}},
        )
        return bool(result.matched_count)

    async def debit_balance(self, user_id: int, amount_cents: int) -> bool:
        """Atomically debit only when the balance covers the amount."""
        result = await self._collection.update_one(
            {"_id": user_id, "wallet_balance_cents": {"$gte": amount_cents}},
            {"$inc": {"wallet_balance_cents": -amount_cents}, "$set": {"updated_at": datetime.now(timezone.utc)}},
        )
        return bool(result.modified_count)
