"""Registry of live chat sockets.

The registry is owned by one application instance and is only touched
from that instance's event loop; broadcast walks a snapshot of the
connection set, so sockets may join or leave while a fanout is running.
"""
import enum
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Collection, Dict, List, Optional

from socialhub.schemas.frames import encode
from socialhub.utils.realtime_bus import BROADCAST_CHANNEL, NoopBus


logger = logging.getLogger(__name__)


class ConnectionState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


@dataclass(eq=False)
class Connection:
    websocket: Any
    user_id: Optional[int] = None
    state: ConnectionState = ConnectionState.UNAUTHENTICATED
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    @property
    def authenticated(self) -> bool:
        return self.state is ConnectionState.AUTHENTICATED


class ConnectionRegistry:

    def __init__(self, bus=None) -> None:
        self._connections: Dict[str, Connection] = {}
        self.bus = bus or NoopBus()

    def __len__(self) -> int:
        return len(self._connections)

    async def connect(self, websocket) -> Connection:
        await websocket.accept()
        return self.add(websocket)

    def add(self, websocket) -> Connection:
        conn = Connection(websocket=websocket)
        self._connections[conn.id] = conn
        logger.info("Socket %s opened (%d live)", conn.id, len(self._connections))
        return conn

    def remove(self, conn: Connection) -> None:
        conn.state = ConnectionState.CLOSED
        if self._connections.pop(conn.id, None) is not None:
            logger.info("Socket %s closed (user=%s, %d live)", conn.id, conn.user_id, len(self._connections))

    def bind(self, conn: Connection, user_id: int) -> None:
        # a later auth frame simply replaces the identity
        if conn.state is ConnectionState.CLOSED:
            return
        conn.user_id = user_id
        conn.state = ConnectionState.AUTHENTICATED
        logger.info("Socket %s authenticated as user %s", conn.id, user_id)

    def authenticated(self) -> List[Connection]:
        return [c for c in self._connections.values() if c.authenticated]

    def is_online(self, user_id: int) -> bool:
        return any(c.user_id == user_id for c in self.authenticated())

    async def send(self, conn: Connection, frame: Dict[str, Any]) -> bool:
        if conn.state is ConnectionState.CLOSED:
            return False
        try:
            await conn.websocket.send_text(encode(frame))
        except Exception as exc:
            # a dead socket only takes itself down
            logger.warning("Dropping socket %s after failed send: %s", conn.id, exc)
            self.remove(conn)
            return False
        return True

    async def broadcast(self, frame: Dict[str, Any], user_ids: Optional[Collection[int]] = None) -> int:
        """Send `frame` to every authenticated socket, or only those bound to `user_ids`."""
        targets = self.authenticated()
        if user_ids is not None:
            wanted = set(user_ids)
            targets = [c for c in targets if c.user_id in wanted]
        delivered = 0
        for conn in targets:
            if await self.send(conn, frame):
                delivered += 1
        return delivered

    async def publish(self, frame: Dict[str, Any], user_ids: Optional[Collection[int]] = None) -> None:
        """Fan out through the bus when several processes share it, else locally."""
        if getattr(self.bus, "enabled", False):
            envelope = {"frame": frame, "userIds": None if user_ids is None else list(user_ids)}
            await self.bus.publish(BROADCAST_CHANNEL, json.dumps(envelope))
            return
        await self.broadcast(frame, user_ids)

    async def deliver_from_bus(self, raw: str) -> None:
        try:
            envelope = json.loads(raw)
            frame = envelope["frame"]
        except (ValueError, KeyError, TypeError):
            logger.warning("Ignoring malformed bus envelope")
            return
        await self.broadcast(frame, envelope.get("userIds"))
