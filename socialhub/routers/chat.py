import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from redis.exceptions import RedisError

from socialhub.config import get_settings
from socialhub.database.connection import mongo_db_dependency
from socialhub.repositories.conversation_repository import ConversationRepository
from socialhub.repositories.message_repository import MessageRepository
from socialhub.repositories.user_repository import UserRepository
from socialhub.schemas.chat import MessageCreate, MessagePublic
from socialhub.services.chat_service import ChatService
from socialhub.services.socket_service import ChatSocketService
from socialhub.utils.dependencies import get_current_user, get_registry
from socialhub.utils.realtime_bus import PRESENCE_TTL_SECONDS
from socialhub.utils.websocket_manager import Connection, ConnectionRegistry


logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


def get_chat_service(db=Depends(mongo_db_dependency)) -> ChatService:
    return ChatService(MessageRepository(db), ConversationRepository(db), UserRepository(db))


def build_socket_service(registry: ConnectionRegistry, chat_service: ChatService) -> ChatSocketService:
    settings = get_settings()
    return ChatSocketService(
        registry,
        chat_service,
        broadcast_scope=settings.ws_broadcast_scope,
        require_token=settings.ws_require_token,
    )


async def _presence_heartbeat(registry: ConnectionRegistry, conn: Connection) -> None:
    while True:
        if conn.user_id is not None:
            try:
                await registry.bus.set_presence(conn.user_id, ttl_seconds=PRESENCE_TTL_SECONDS)
            except RedisError as exc:
                logger.warning("Presence update for user %s failed: %s", conn.user_id, exc)
        await asyncio.sleep(PRESENCE_TTL_SECONDS / 2)


@router.websocket("/ws")
async def chat_socket(websocket: WebSocket, service: ChatService = Depends(get_chat_service)):
    registry: ConnectionRegistry = websocket.app.state.registry
    socket_service = build_socket_service(registry, service)
    conn = await registry.connect(websocket)
    heartbeat = None
    if getattr(registry.bus, "enabled", False):
        heartbeat = asyncio.create_task(_presence_heartbeat(registry, conn))
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            await socket_service.handle_frame(conn, raw)
    except WebSocketDisconnect:
        pass
    finally:
        registry.remove(conn)
        if heartbeat:
            heartbeat.cancel()


@router.post("/api/messages", response_model=MessagePublic, status_code=status.HTTP_201_CREATED)
async def send_message(
    body: MessageCreate,
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
    registry: ConnectionRegistry = Depends(get_registry),
):
    """REST twin of the socket `message` frame: same persistence, same fanout."""
    saved = await service.send_message(
        sender_id=current_user["_id"],
        conversation_id=body.conversation_id,
        content=body.content,
        media_url=body.media_url,
        media_type=body.media_type,
    )
    return await build_socket_service(registry, service).publish(saved)
