"""Chat client that keeps one logical connection to ``/ws`` alive.

States::

    DISCONNECTED -> CONNECTING -> AUTHENTICATING -> CONNECTED
         ^              |               |               |
         |              v               v               v
         +--------- BACKOFF(attempt) <--+---------------+

A close with code 1000 (or ``sign_out``) goes straight to DISCONNECTED and
never schedules a retry. Any other close waits ``reconnect_delay(attempt)``
and tries again, at most ``max_attempts`` times in a row; a successful
open resets the count.
"""
import asyncio
import enum
import json
import logging
from typing import Any, Callable, Dict, Optional

from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed, WebSocketException


logger = logging.getLogger(__name__)

NORMAL_CLOSURE = 1000
BASE_DELAY_SECONDS = 1.0
MAX_DELAY_SECONDS = 30.0
MAX_ATTEMPTS = 5

NOT_CONNECTED_NOTICE = "Chat connection lost. Reconnecting..."
CONNECT_FAILED_NOTICE = "Failed to connect to chat server"
SEND_FAILED_NOTICE = "Failed to send message. Please try again."
GAVE_UP_NOTICE = "Disconnected from chat server"


def reconnect_delay(attempt: int, base: float = BASE_DELAY_SECONDS, cap: float = MAX_DELAY_SECONDS) -> float:
    return min(base * (2 ** attempt), cap)


class ClientState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    CONNECTED = "connected"
    BACKOFF = "backoff"


class ReconnectingChatClient:

    def __init__(
        self,
        url: str,
        *,
        connect: Callable[[str], Any] = ws_connect,
        sleep: Callable[[float], Any] = asyncio.sleep,
        on_frame: Optional[Callable[[Dict[str, Any]], None]] = None,
        on_notice: Optional[Callable[[str], None]] = None,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY_SECONDS,
        max_delay: float = MAX_DELAY_SECONDS,
    ) -> None:
        self.url = url
        self._connect = connect
        self._sleep = sleep
        self._on_frame = on_frame
        self._on_notice = on_notice
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay

        self.state = ClientState.DISCONNECTED
        self.attempt = 0
        self.user_id: Optional[int] = None
        self.last_frame: Optional[Dict[str, Any]] = None
        self._ws = None
        self._reader: Optional[asyncio.Task] = None
        self._retry: Optional[asyncio.Task] = None

    @property
    def is_open(self) -> bool:
        return self._ws is not None and self.state in (ClientState.AUTHENTICATING, ClientState.CONNECTED)

    @property
    def retry_task(self) -> Optional[asyncio.Task]:
        return self._retry

    async def sign_in(self, user_id: int) -> None:
        # a new identity never shares the old socket
        await self._teardown()
        self.user_id = user_id
        await self._open()

    async def sign_out(self) -> None:
        self.user_id = None
        await self._teardown()

    async def _teardown(self) -> None:
        self._cancel_retry()
        ws, self._ws = self._ws, None
        reader, self._reader = self._reader, None
        if ws is not None:
            await ws.close(code=NORMAL_CLOSURE, reason="User disconnected")
        if reader is not None and reader is not asyncio.current_task():
            reader.cancel()
            await asyncio.gather(reader, return_exceptions=True)
        self.attempt = 0
        self.state = ClientState.DISCONNECTED

    async def send(self, frame: Dict[str, Any]) -> bool:
        """Send one frame; when the socket is not open the frame is dropped and a reconnect starts."""
        if self.is_open:
            try:
                await self._ws.send(json.dumps(frame))
                return True
            except ConnectionClosed:
                self._notify(SEND_FAILED_NOTICE)
                return False

        logger.warning("Chat socket not connected, dropped %s frame", frame.get("type"))
        self._notify(NOT_CONNECTED_NOTICE)
        if self.user_id is not None and self.state is not ClientState.CONNECTING:
            self._cancel_retry()
            await self._open()
        return False

    async def _open(self) -> None:
        if self.user_id is None:
            return
        self.state = ClientState.CONNECTING
        try:
            ws = await self._connect(self.url)
        except (OSError, WebSocketException, asyncio.TimeoutError) as exc:
            logger.warning("Connecting to %s failed: %s", self.url, exc)
            self._notify(CONNECT_FAILED_NOTICE)
            self._handle_close(None)
            return

        if self.user_id is None:
            # signed out while the handshake was in flight
            await ws.close(code=NORMAL_CLOSURE, reason="User disconnected")
            self.state = ClientState.DISCONNECTED
            return

        self._ws = ws
        self.attempt = 0
        self.state = ClientState.AUTHENTICATING
        logger.info("Chat socket open, authenticating as user %s", self.user_id)
        self._reader = asyncio.create_task(self._read(ws))
        try:
            await ws.send(json.dumps({"type": "auth", "userId": self.user_id}))
        except ConnectionClosed:
            # the reader sees the same close and takes the backoff path
            pass

    async def _read(self, ws) -> None:
        try:
            async for raw in ws:
                self._dispatch(raw)
        except ConnectionClosed:
            pass
        if self._ws is not ws:
            return
        self._ws = None
        self._reader = None
        logger.info("Chat socket closed with code %s", ws.close_code)
        self._handle_close(ws.close_code)

    def _handle_close(self, code: Optional[int]) -> None:
        if code == NORMAL_CLOSURE or self.user_id is None:
            self.attempt = 0
            self.state = ClientState.DISCONNECTED
            return
        if self.attempt >= self.max_attempts:
            logger.error("Giving up on chat socket after %d attempts", self.attempt)
            self.state = ClientState.DISCONNECTED
            self._notify(GAVE_UP_NOTICE)
            return
        delay = reconnect_delay(self.attempt, self.base_delay, self.max_delay)
        self.attempt += 1
        self.state = ClientState.BACKOFF
        logger.info("Reconnecting in %.1fs (attempt %d)", delay, self.attempt)
        self._retry = asyncio.create_task(self._retry_after(delay))

    async def _retry_after(self, delay: float) -> None:
        await self._sleep(delay)
        self._retry = None
        await self._open()

    def _cancel_retry(self) -> None:
        retry, self._retry = self._retry, None
        if retry is not None and not retry.done() and retry is not asyncio.current_task():
            retry.cancel()

    def _dispatch(self, raw) -> None:
        try:
            frame = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring undecodable frame from server")
            return
        if not isinstance(frame, dict):
            return
        self.last_frame = frame
        kind = frame.get("type")
        if kind == "auth" and frame.get("success"):
            self.state = ClientState.CONNECTED
        elif kind == "error":
            self._notify(frame.get("message") or "Connection error")
        if self._on_frame is not None:
            self._on_frame(frame)

    def _notify(self, text: str) -> None:
        if self._on_notice is not None:
            self._on_notice(text)
