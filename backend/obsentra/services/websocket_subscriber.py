"""
WebSocket Subscriber
====================

Wraps one FastAPI/Starlette WebSocket so the broadcaster can use it.

WHY A QUEUE?
-----------
Writing to a socket can be slow (bad WiFi, sleepy browser tab...). If the
broadcaster awaited every write, one slow client would hold up everyone.

So each subscriber gets its own small outbox:
- send() just drops the JSON into the outbox (instant, never waits)
- a background writer task pulls from the outbox and writes to the socket
- if the outbox is full, the client is too slow -> send() returns False and
  the broadcaster drops it

Messages leave the outbox in the order they went in, so each client sees
events in publish order.
"""

from __future__ import annotations

import asyncio
import logging
import uuid

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)


class WebSocketSubscriber:
    """A Subscriber backed by a WebSocket and a bounded outbox."""

    # Close code sent when we drop a client (1011 = server-side error / overload)
    DROP_CLOSE_CODE = 1011

    def __init__(self, websocket: WebSocket, max_pending: int = 100):
        self.id = uuid.uuid4().hex
        self.websocket = websocket
        self._outbox: asyncio.Queue[str] = asyncio.Queue(maxsize=max_pending)
        self._closed = False
        self._writer: asyncio.Task | None = None

    def __repr__(self) -> str:
        client = self.websocket.client
        where = f"{client.host}:{client.port}" if client else "unknown"
        return f"<WebSocketSubscriber {self.id[:8]} {where}>"

    # =========================================================================
    # SUBSCRIBER INTERFACE
    # =========================================================================

    def start(self):
        """Start the writer task. Must be called from the event loop."""
        if self._writer is None:
            self._writer = asyncio.create_task(self._drain())

    def is_open(self) -> bool:
        return (
            not self._closed
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def send(self, payload: str) -> bool:
        if not self.is_open():
            return False
        try:
            self._outbox.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning(f"{self!r} outbox full ({self._outbox.maxsize} pending), too slow")
            return False
        return True

    def close(self):
        if self._closed:
            return
        self._closed = True
        if self._writer is not None and not self._writer.done():
            self._writer.cancel()

    async def wait_closed(self):
        """Wait for the writer task to finish shutting the socket."""
        if self._writer is not None:
            await asyncio.gather(self._writer, return_exceptions=True)

    # =========================================================================
    # WRITER TASK
    # =========================================================================

    async def _drain(self):
        try:
            while True:
                payload = await self._outbox.get()
                await self.websocket.send_text(payload)
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.info(f"{self!r} write failed: {e!r}")
        finally:
            self._closed = True
            await self._close_socket()

    async def _close_socket(self):
        if (
            self.websocket.application_state == WebSocketState.DISCONNECTED
            or self.websocket.client_state == WebSocketState.DISCONNECTED
        ):
            return
        try:
            await self.websocket.close(code=self.DROP_CLOSE_CODE)
        except (RuntimeError, OSError) as e:
            logger.debug(f"{self!r} close failed: {e!r}")
