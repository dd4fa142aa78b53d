"""
Chat client helpers

MessageFeed, TypingIndicator and TypingNotifier hold the receiving-side
rules (dedupe by id, ignore own typing, stop typing after inactivity).
ChatClient wires them to the HTTP and WebSocket APIs.
"""
import asyncio
import json
import logging
from urllib.parse import urlencode
from typing import Awaitable, Callable, Dict, List, Optional

import httpx
import websockets

from realtime_chat.config import settings

logger = logging.getLogger(__name__)

MEDIA_TYPES = ("image", "video")


class MessageFeed:
    """Ordered message list that ignores repeats of an id it already holds"""

    def __init__(self):
        self._messages: List[dict] = []
        self._seen = set()

    def load(self, history: List[dict]):
        """Replace the feed with a full history fetch"""
        self._messages = []
        self._seen = set()
        for message in history:
            self.add(message)

    def add(self, message: dict) -> bool:
        """
        Append a live message

        Returns:
            False if the message id was already present
        """
        message_id = message.get("id")
        if message_id in self._seen:
            return False
        self._seen.add(message_id)
        self._messages.append(message)
        return True

    @property
    def messages(self) -> List[dict]:
        return list(self._messages)

    def media(self) -> List[dict]:
        """Image and video messages that carry a file"""
        return [
            m for m in self._messages
            if m.get("type") in MEDIA_TYPES and m.get("fileUrl")
        ]

    def __len__(self):
        return len(self._messages)


class TypingIndicator:
    """Who is typing right now, as seen by `me`"""

    def __init__(self, me: str):
        self.me = me
        self._typing: List[str] = []

    def on_typing(self, identity: str):
        if identity == self.me or identity in self._typing:
            return
        self._typing.append(identity)

    def on_stop_typing(self, identity: str):
        if identity in self._typing:
            self._typing.remove(identity)

    @property
    def users(self) -> List[str]:
        return list(self._typing)

    def describe(self) -> str:
        if not self._typing:
            return ""
        verb = "are" if len(self._typing) > 1 else "is"
        return f"{', '.join(self._typing)} {verb} typing..."


class TypingNotifier:
    """
    Emits `typing` on each keystroke and `stop_typing` once no keystroke
    arrived for `timeout` seconds.
    """

    def __init__(
        self,
        identity: str,
        emit: Callable[[str, str], Awaitable[None]],
        timeout: Optional[float] = None
    ):
        self.identity = identity
        self.emit = emit
        self.timeout = settings.TYPING_TIMEOUT if timeout is None else timeout
        self._expiry: Optional[asyncio.Task] = None

    async def keystroke(self):
        await self.emit("typing", self.identity)
        self._cancel_expiry()
        self._expiry = asyncio.create_task(self._expire())

    async def stop(self):
        """Stop typing now (message sent, input cleared)"""
        if self._expiry is None:
            return
        self._cancel_expiry()
        await self.emit("stop_typing", self.identity)

    @property
    def active(self) -> bool:
        return self._expiry is not None and not self._expiry.done()

    async def _expire(self):
        await asyncio.sleep(self.timeout)
        self._expiry = None
        await self.emit("stop_typing", self.identity)

    def _cancel_expiry(self):
        if self._expiry is not None and not self._expiry.done():
            self._expiry.cancel()
        self._expiry = None


class ChatClient:
    """
    Minimal chat client

    Usage:
        async with ChatClient("http://localhost:8000", "alice") as client:
            await client.fetch_history()
            await client.send("hi")
            await client.listen()
    """

    def __init__(self, base_url: str, username: str, typing_timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.feed = MessageFeed()
        self.typing = TypingIndicator(username)
        self.notifier = TypingNotifier(username, self.emit, timeout=typing_timeout)
        self.http = httpx.AsyncClient(base_url=self.base_url, headers={"X-Username": username})
        self.ws = None

    @property
    def ws_url(self) -> str:
        scheme = "wss" if self.base_url.startswith("https") else "ws"
        host = self.base_url.split("://", 1)[-1]
        return f"{scheme}://{host}/ws?{urlencode({'username': self.username})}"

    async def __aenter__(self):
        try:
            self.ws = await websockets.connect(self.ws_url)
        except Exception:
            await self.http.aclose()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def fetch_history(self) -> List[dict]:
        response = await self.http.get("/api/chat")
        response.raise_for_status()
        self.feed.load(response.json())
        return self.feed.messages

    async def send(self, content: str = "", type: str = "text", file_url: Optional[str] = None) -> dict:
        response = await self.http.post(
            "/api/chat",
            json={"content": content, "type": type, "fileUrl": file_url}
        )
        response.raise_for_status()
        message = response.json()
        self.feed.add(message)
        await self.notifier.stop()
        return message

    async def emit(self, event: str, data: str):
        await self.ws.send(json.dumps({"event": event, "data": data}))

    def dispatch(self, frame: Dict) -> None:
        """Apply one server frame to local state"""
        event = frame.get("event")
        data = frame.get("data")

        if event == "message":
            self.feed.add(data)
        elif event == "typing":
            self.typing.on_typing(data)
        elif event == "stop_typing":
            self.typing.on_stop_typing(data)
        elif event == "error":
            logger.warning(f"Server error: {data}")

    async def listen(self):
        """Apply server frames until the connection closes"""
        async for raw in self.ws:
            self.dispatch(json.loads(raw))

    async def close(self):
        await self.notifier.stop()
        if self.ws is not None:
            await self.ws.close()
        await self.http.aclose()
