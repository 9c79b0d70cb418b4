from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument


async def next_id(db: AsyncIOMotorDatabase, name: str) -> int:
    """Allocate the next integer id for a collection from the counters collection."""
    doc = await db["counters"].find_one_and_update(
        {"_id": name},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return int(doc["seq"])
