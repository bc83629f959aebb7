"""
Relay Connection

WebSocket client link between one client and the broadcast relay. The
connection is an explicit object owned by the session; there is no
module-level handle. Sends never wait on the network: messages go into a
bounded queue drained by a writer task. A closed link stays closed.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import websockets
from websockets.exceptions import ConnectionClosed

from spotlight_remote.client.state import Disposer
from spotlight_remote.protocol import ProtocolError, encode, parse_payload

logger = logging.getLogger(__name__)

MessageHandler = Callable[[dict[str, Any]], None]


@runtime_checkable
class Link(Protocol):
    """The part of a transport link the pointer pipeline uses."""

    @property
    def is_open(self) -> bool:
        """Whether messages can currently be sent."""

    def send(self, message: dict[str, Any]) -> bool:
        """Queue *message* for delivery without blocking."""

    def subscribe(self, handler: MessageHandler) -> Disposer:
        """Deliver each inbound message to *handler* until disposed."""


class RelayConnection:
    """WebSocket link to the relay.

    Args:
        url: Relay address (e.g. ``"ws://192.168.1.20:3001/"``).
        queue_size: Outbound messages buffered before new ones are dropped.
    """

    def __init__(self, url: str, queue_size: int = 64) -> None:
        self.url = url
        self._websocket: Any = None
        self._open = False
        self._outbound: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self._handlers: list[MessageHandler] = []
        self._tasks: list[asyncio.Task[None]] = []
        self._closed = asyncio.Event()
        self.dropped = 0

    @property
    def is_open(self) -> bool:
        return self._open

    async def open(self) -> None:
        """Connect to the relay and start the reader and writer tasks.

        Raises:
            OSError: If the relay cannot be reached.
            websockets.exceptions.InvalidHandshake: If the upgrade fails.
        """
        if self._open:
            logger.warning("Already connected")
            return
        self._websocket = await websockets.connect(self.url)
        self._open = True
        loop = asyncio.get_running_loop()
        self._tasks = [
            loop.create_task(self._read()),
            loop.create_task(self._write()),
        ]
        logger.info("Connected to relay at %s", self.url)

    def send(self, message: dict[str, Any]) -> bool:
        if not self._open:
            return False
        try:
            self._outbound.put_nowait(encode(message))
        except asyncio.QueueFull:
            self.dropped += 1
            logger.debug("Outbound buffer full, message dropped")
            return False
        return True

    def subscribe(self, handler: MessageHandler) -> Disposer:
        self._handlers.append(handler)

        def dispose() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return dispose

    async def close(self) -> None:
        """Close the connection and stop background tasks."""
        self._mark_closed()
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks = []
        if self._websocket is not None:
            try:
                await self._websocket.close()
            except (ConnectionClosed, OSError) as e:
                logger.debug("Close after disconnect: %s", e)
            self._websocket = None

    async def flush(self, timeout: float = 1.0) -> None:
        """Wait up to *timeout* seconds for queued messages to be written."""
        if not self._open:
            return
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._outbound.join(), timeout)

    async def wait_closed(self) -> None:
        """Block until the link closes for any reason."""
        await self._closed.wait()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _mark_closed(self) -> None:
        if self._open:
            logger.info("Relay connection closed")
        self._open = False
        self._closed.set()

    def dispatch(self, raw: str | bytes) -> None:
        """Decode one inbound frame and hand it to every handler."""
        try:
            data = parse_payload(raw)
        except ProtocolError as e:
            logger.warning("Ignoring malformed message from relay: %s", e)
            return
        for handler in list(self._handlers):
            try:
                handler(data)
            except Exception:
                logger.exception("Message handler failed")

    async def _read(self) -> None:
        try:
            async for raw in self._websocket:
                self.dispatch(raw)
        except ConnectionClosed as e:
            logger.debug("Relay closed the connection: %s", e)
        except OSError as e:
            logger.error("Relay connection error: %s", e)
        finally:
            self._mark_closed()

    async def _write(self) -> None:
        try:
            while True:
                payload = await self._outbound.get()
                try:
                    await self._websocket.send(payload)
                finally:
                    self._outbound.task_done()
        except ConnectionClosed as e:
            logger.debug("Send failed, connection closed: %s", e)
        except OSError as e:
            logger.error("Relay connection error: %s", e)
        finally:
            self._mark_closed()
