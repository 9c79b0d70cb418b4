from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING

from socialhub.database.sequences import next_id
from socialhub.models.market import TransactionType, WalletTransactionDocument


class WalletRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["wallet_transactions"]

    async def record(
        self,
        user_id: int,
        type: TransactionType,
        amount_cents: int,
        description: Optional[str] = None,
        reference_id: Optional[str] = None,
        status: str = "completed",
    ) -> WalletTransactionDocument:
        doc = {
            "_id": await next_id(self._db, "wallet_transactions"),
            "user_id": user_id,
            "type": type,
            "amount_cents": amount_cents,
            "description": description,
            "reference_id": reference_id,
            "status": status,
            "created_at": datetime.now(timezone.utc),
        }
        await self.collection.insert_one(doc)
        return doc

    async def list_for_user(self, user_id: int, limit: int = 100) -> List[WalletTransactionDocument]:
        cursor = self.collection.find({"user_id": user_id}).sort([("created_at", DESCENDING), ("_id", DESCENDING)]).limit(limit)
        return await cursor.to_list(length=limit)
