from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from socialhub.database.sequences import next_id
from socialhub.models.market import ProductDocument


class ProductRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["products"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("category", ASCENDING), ("created_at", DESCENDING)])
        await self.collection.create_index([("seller_id", ASCENDING)])

    async def create_product(self, seller_id: int, fields: Dict[str, Any]) -> ProductDocument:
        now = datetime.now(timezone.utc)
        doc: Dict[str, Any] = {
            "_id": await next_id(self._db, "products"),
            "seller_id": seller_id,
            "title": fields["title"],
            "description": fields.get("description"),
            "price_cents": fields["price_cents"],
            "category": fields.get("category"),
            "images": list(fields.get("images") or []),
            "condition": fields.get("condition"),
            "location": fields.get("location"),
            "is_active": True,
            "is_sold": False,
            "views_count": 0,
            "created_at": now,
            "updated_at": now,
        }
        await self.collection.insert_one(doc)
        return doc

    async def view_product(self, product_id: int) -> Optional[ProductDocument]:
        return await self.collection.find_one_and_update(
            {"_id": product_id, "is_active": True},
            {"$inc": {"views_count": 1}},
            return_document=ReturnDocument.AFTER,
        )

    async def list_active(self, category: Optional[str] = None, limit: int = 20, offset: int = 0) -> List[ProductDocument]:
        query: Dict[str, Any] = {"is_active": True}
        if category:
            query["category"] = category
        cursor = self.collection.find(query).sort([("created_at", DESCENDING), ("_id", DESCENDING)]).skip(offset).limit(limit)
        return await cursor.to_list(length=limit)

    async def list_for_seller(self, seller_id: int, limit: int = 100) -> List[ProductDocument]:
        cursor = self.collection.find({"seller_id": seller_id, "is_active": True}).sort([("created_at", DESCENDING), ("_id", DESCENDING)]).limit(limit)
        return await cursor.to_list(length=limit)
