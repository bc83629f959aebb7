"""Broadcast hub: the relay's connection set and fan-out logic."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Protocol

from spotlight_remote.protocol import ProtocolError, parse_payload

logger = logging.getLogger(__name__)


class TextSocket(Protocol):
    """The part of a server-side WebSocket the hub writes to."""

    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


@dataclass(eq=False)
class RelayLink:
    """One connected peer and its outbound buffer.

    Outbound payloads go through a bounded queue drained by a writer task,
    so offering a payload never waits on the peer's socket.
    """

    websocket: TextSocket
    queue_size: int = 32
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    connected_at: float = field(default_factory=time.time)
    is_open: bool = True
    dropped: int = 0

    def __post_init__(self) -> None:
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=self.queue_size)
        self._writer: asyncio.Task[None] | None = None

    def start(self) -> None:
        """Start draining the outbound queue on the running loop."""
        if self._writer is None:
            self._writer = asyncio.get_running_loop().create_task(self._drain())

    def offer(self, payload: str) -> bool:
        """Queue *payload* for delivery without blocking.

        Returns:
            False if the link is closed or its buffer is full.
        """
        if not self.is_open:
            return False
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.debug("Relay: peer %s buffer full, message skipped", self.id)
            return False
        return True

    @property
    def pending(self) -> int:
        """Number of payloads waiting to be written."""
        return self._queue.qsize()

    async def close(self) -> None:
        """Stop the writer and close the socket. Safe to call twice."""
        self.is_open = False
        if self._writer is not None:
            self._writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._writer
            self._writer = None
        try:
            await self.websocket.close()
        except Exception as e:  # noqa: BLE001
            logger.debug("Relay: close for %s failed: %s", self.id, e)

    async def _drain(self) -> None:
        while True:
            payload = await self._queue.get()
            try:
                await self.websocket.send_text(payload)
            except Exception as e:  # noqa: BLE001
                # Removal from the hub is driven by the receive loop's close event.
                self.is_open = False
                logger.debug("Relay: write to %s failed: %s", self.id, e)
                return


class BroadcastHub:
    """Holds the currently open links and fans each message out to the others.

    The hub keeps no message history: a peer that connects after a
    broadcast never sees it.
    """

    def __init__(self, queue_size: int = 32) -> None:
        self._queue_size = queue_size
        self._links: set[RelayLink] = set()
        self.messages_relayed = 0
        self.messages_dropped = 0

    # ------------------------------------------------------------------
    # Connection set
    # ------------------------------------------------------------------

    def connect(self, websocket: TextSocket) -> RelayLink:
        """Register a newly accepted socket and start its writer."""
        link = RelayLink(websocket=websocket, queue_size=self._queue_size)
        self._links.add(link)
        link.start()
        logger.info("Relay: client %s connected (total=%d)", link.id, len(self._links))
        return link

    async def disconnect(self, link: RelayLink) -> None:
        """Remove *link* from the set and release its resources."""
        if link in self._links:
            self._links.discard(link)
            logger.info("Relay: client %s disconnected (total=%d)", link.id, len(self._links))
        await link.close()

    async def close_all(self) -> None:
        """Close every link, used on shutdown."""
        for link in list(self._links):
            await self.disconnect(link)

    @property
    def connection_count(self) -> int:
        return len(self._links)

    @property
    def links(self) -> frozenset[RelayLink]:
        return frozenset(self._links)

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    def on_message(self, sender: RelayLink, payload: str | bytes) -> int:
        """Forward *payload* verbatim to every open link except *sender*.

        Binary frames are decoded as UTF-8 and forwarded as text. Payloads
        that do not decode or parse as a JSON object are logged and dropped.

        Returns:
            Number of peers the payload was queued for.
        """
        try:
            if isinstance(payload, bytes):
                try:
                    payload = payload.decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise ProtocolError(f"binary frame is not UTF-8: {exc}") from exc
            parse_payload(payload)
        except ProtocolError as e:
            self.messages_dropped += 1
            logger.warning("Relay: dropped malformed message from %s: %s", sender.id, e)
            return 0

        logger.debug("Relay: received from %s: %s", sender.id, payload)
        delivered = 0
        for link in list(self._links):
            if link is sender or not link.is_open:
                continue
            if link.offer(payload):
                delivered += 1
        self.messages_relayed += 1
        return delivered

    def get_stats(self) -> dict[str, object]:
        """Return hub statistics for the health endpoint."""
        return {
            "connections": len(self._links),
            "messages_relayed": self.messages_relayed,
            "messages_dropped": self.messages_dropped,
        }
