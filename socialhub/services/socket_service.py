import logging
from typing import Any, Dict, List, Optional, Union

import jwt
from pymongo.errors import PyMongoError
from redis.exceptions import RedisError

from socialhub.errors import ForbiddenError, InvalidRequestError, NotFoundError
from socialhub.models.message import MessageDocument
from socialhub.schemas.chat import MessagePublic
from socialhub.schemas.frames import (
    FrameError,
    auth_ok,
    decode_frame,
    error_frame,
    message_event,
    validate_auth,
    validate_message,
)
from socialhub.services.chat_service import ChatService
from socialhub.utils.security import user_id_from_token
from socialhub.utils.websocket_manager import Connection, ConnectionRegistry


logger = logging.getLogger(__name__)

SEND_FAILED = "Failed to send message"


class ChatSocketService:
    """Per-frame handling for the chat socket.

    - ``auth`` binds a user id to the connection and is acknowledged.
    - ``message`` from an authenticated socket is validated, persisted with
      the bound user as sender, then fanned out as a ``message`` event.
    - ``message`` from an unauthenticated socket is dropped without reply.
    - anything unparseable, invalid or rejected by the store is answered
      with one ``error`` frame; the socket stays open.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        chat_service: ChatService,
        broadcast_scope: str = "all",
        require_token: bool = False,
    ) -> None:
        self._registry = registry
        self._chat = chat_service
        self._broadcast_scope = broadcast_scope
        self._require_token = require_token

    async def handle_frame(self, conn: Connection, raw: Union[str, bytes]) -> None:
        try:
            data = decode_frame(raw)
            kind = data["type"]
            if kind == "auth":
                await self._handle_auth(conn, data)
            elif kind == "message":
                await self._handle_message(conn, data)
            else:
                logger.debug("Ignoring %r frame on socket %s", kind, conn.id)
        except FrameError as exc:
            logger.warning("Rejected frame on socket %s: %s", conn.id, exc)
            await self._registry.send(conn, error_frame(str(exc)))

    async def _handle_auth(self, conn: Connection, data: Dict[str, Any]) -> None:
        frame = validate_auth(data)
        if frame.token is not None:
            try:
                user_id = user_id_from_token(frame.token)
            except jwt.InvalidTokenError:
                raise FrameError("Invalid or expired token")
        elif self._require_token:
            raise FrameError("Authentication token required")
        else:
            user_id = frame.user_id
        self._registry.bind(conn, user_id)
        await self._registry.send(conn, auth_ok())

    async def _handle_message(self, conn: Connection, data: Dict[str, Any]) -> None:
        if not conn.authenticated:
            logger.debug("Dropping message frame from unauthenticated socket %s", conn.id)
            return
        frame = validate_message(data)
        try:
            saved = await self._chat.send_message(
                sender_id=conn.user_id,
                conversation_id=frame.conversation_id,
                content=frame.content,
                media_url=frame.media_url,
                media_type=frame.media_type,
            )
        except (InvalidRequestError, NotFoundError, ForbiddenError) as exc:
            raise FrameError(str(exc))
        except PyMongoError:
            logger.exception("Storing message from user %s failed", conn.user_id)
            raise FrameError(SEND_FAILED)
        try:
            await self.publish(saved)
        except (PyMongoError, RedisError):
            logger.exception("Fanning out message %s failed", saved["_id"])
            raise FrameError(SEND_FAILED)

    async def publish(self, saved: MessageDocument) -> Dict[str, Any]:
        payload = MessagePublic.model_validate(saved).model_dump(mode="json", by_alias=True)
        recipients: Optional[List[int]] = None
        if self._broadcast_scope == "participants":
            recipients = await self._chat.participant_ids(saved["conversation_id"])
        await self._registry.publish(message_event(payload), recipients)
        return payload
