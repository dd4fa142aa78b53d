"""
WebSocket-backed connection with a bounded outbox and a single writer
"""
import asyncio
import logging
import uuid
from typing import Optional
from fastapi import WebSocket

from realtime_chat.config import settings
from realtime_chat.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class WebSocketConnection:
    """
    One live client session.

    push() only enqueues, so a slow client never stalls the publisher.
    run_writer() drains the outbox in FIFO order, which keeps per-recipient
    delivery in publish order. push() must be called from the event loop
    that runs the writer.
    """

    def __init__(
        self,
        websocket: WebSocket,
        identity: Optional[str] = None,
        outbox_size: Optional[int] = None,
        send_timeout: Optional[float] = None
    ):
        self.id = uuid.uuid4().hex
        self.identity = identity
        self.websocket = websocket
        self.send_timeout = send_timeout or settings.WS_SEND_TIMEOUT
        self._outbox: asyncio.Queue = asyncio.Queue(maxsize=outbox_size or settings.WS_OUTBOX_SIZE)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Events waiting in the outbox"""
        return self._outbox.qsize()

    def push(self, payload: str) -> None:
        """Enqueue a serialized event or raise DeliveryError"""
        if self._closed:
            raise DeliveryError(self.id, "connection closed")

        try:
            self._outbox.put_nowait(payload)
        except asyncio.QueueFull:
            raise DeliveryError(self.id, "outbox full")

    async def run_writer(self, on_failure=None) -> None:
        """
        Drain the outbox to the socket until closed or a send fails.

        Args:
            on_failure: called with this connection when a send fails or times out
        """
        while not self._closed:
            payload = await self._outbox.get()
            try:
                await asyncio.wait_for(self.websocket.send_text(payload), timeout=self.send_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    f"⏱️  Send to {self.id} timed out after {self.send_timeout}s",
                    extra={'connection_id': self.id}
                )
                self._fail(on_failure)
                return
            except Exception as e:
                logger.warning(
                    f"📭 Send to {self.id} failed: {e}",
                    extra={'connection_id': self.id}
                )
                self._fail(on_failure)
                return

    def _fail(self, on_failure) -> None:
        dropped = self.close()
        if dropped:
            logger.info(f"Dropped {dropped} queued events for {self.id}", extra={'connection_id': self.id})
        if on_failure is not None:
            on_failure(self)

    def close(self) -> int:
        """
        Stop accepting events and discard anything still queued.

        Returns:
            Number of events dropped
        """
        self._closed = True
        dropped = 0
        while not self._outbox.empty():
            self._outbox.get_nowait()
            dropped += 1
        return dropped

    def __repr__(self):
        return f"<WebSocketConnection(id={self.id}, identity={self.identity!r})>"
