from fastapi import APIRouter, Depends
from redis.exceptions import RedisError

from socialhub.utils.dependencies import get_registry
from socialhub.utils.websocket_manager import ConnectionRegistry


router = APIRouter(prefix="/api/presence", tags=["chat"])


@router.get("/{user_id}")
async def presence(user_id: int, registry: ConnectionRegistry = Depends(get_registry)):
    """
    Online status: a live authenticated socket in this process, or a
    presence key in Redis when several processes share the bus.
    """
    online = registry.is_online(user_id)
    if not online and getattr(registry.bus, "enabled", False):
        try:
            online = await registry.bus.is_online(user_id)
        except RedisError:
            online = False
    return {"userId": user_id, "online": bool(online)}
