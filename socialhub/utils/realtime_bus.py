import asyncio
import logging
from typing import Awaitable, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError


logger = logging.getLogger(__name__)

BROADCAST_CHANNEL = "chat:broadcast"
PRESENCE_TTL_SECONDS = 60


class NoopBus:

    enabled = False

    async def publish(self, channel: str, message: str) -> None:
        return

    async def subscribe(self, channel: str, on_message: Callable[[str], Awaitable[None]]):
        return _IdleSubscription()

    async def set_presence(self, user_id: int, ttl_seconds: int = PRESENCE_TTL_SECONDS) -> None:
        return

    async def is_online(self, user_id: int) -> bool:
        return False

    async def close(self) -> None:
        return


class _IdleSubscription:

    async def run(self) -> None:
        await asyncio.Future()

    async def cancel(self) -> None:
        return


class _RedisSubscription:

    def __init__(self, pubsub, channel: str, on_message: Callable[[str], Awaitable[None]]) -> None:
        self._pubsub = pubsub
        self._channel = channel
        self._on_message = on_message
        self._running = True

    async def run(self) -> None:
        while self._running:
            try:
                msg = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
            except RedisError as exc:
                logger.warning("Redis subscription on %s failed: %s", self._channel, exc)
                await asyncio.sleep(0.5)
                continue
            if msg and msg.get("type") == "message":
                data = msg.get("data")
                if isinstance(data, bytes):
                    data = data.decode("utf-8")
                await self._on_message(data)

    async def cancel(self) -> None:
        self._running = False
        try:
            await self._pubsub.unsubscribe(self._channel)
            await self._pubsub.aclose()
        except RedisError as exc:
            logger.warning("Redis unsubscribe from %s failed: %s", self._channel, exc)


class RedisBus:

    enabled = True

    def __init__(self, url: str) -> None:
        self._redis = redis.from_url(url)

    async def publish(self, channel: str, message: str) -> None:
        await self._redis.publish(channel, message)

    async def subscribe(self, channel: str, on_message: Callable[[str], Awaitable[None]]):
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(channel)
        return _RedisSubscription(pubsub, channel, on_message)

    async def set_presence(self, user_id: int, ttl_seconds: int = PRESENCE_TTL_SECONDS) -> None:
        await self._redis.set(f"presence:{user_id}", "online", ex=ttl_seconds)

    async def is_online(self, user_id: int) -> bool:
        ttl = await self._redis.ttl(f"presence:{user_id}")
        return bool(ttl and ttl > 0)

    async def close(self) -> None:
        await self._redis.aclose()


def build_bus(url: Optional[str]):
    if not url:
        return NoopBus()
    logger.info("Realtime fanout through Redis enabled")
    return RedisBus(url)
