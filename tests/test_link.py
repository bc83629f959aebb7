"""Tests for RelayConnection, the client-side WebSocket link."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from conftest import settle

from spotlight_remote.client.link import Link, RelayConnection

URL = "ws://relay.test:3001/"


class FakeWebSocket:
    """Stands in for a websockets client connection."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.inbound: asyncio.Queue[str | None] = asyncio.Queue()
        self.closed = False
        self.fail = False

    def __aiter__(self) -> FakeWebSocket:
        return self

    async def __anext__(self) -> str:
        item = await self.inbound.get()
        if item is None:
            raise StopAsyncIteration
        return item

    async def send(self, data: str) -> None:
        if self.fail:
            raise OSError("broken pipe")
        self.sent.append(data)

    async def close(self) -> None:
        self.closed = True
        self.inbound.put_nowait(None)


@pytest.fixture
def fake_ws() -> FakeWebSocket:
    return FakeWebSocket()


@pytest.fixture
def connect(fake_ws: FakeWebSocket):
    with patch(
        "spotlight_remote.client.link.websockets.connect",
        new=AsyncMock(return_value=fake_ws),
    ) as mock:
        yield mock


class TestRelayConnection:
    def test_satisfies_link_protocol(self) -> None:
        assert isinstance(RelayConnection(URL), Link)

    def test_send_before_open(self) -> None:
        link = RelayConnection(URL)
        assert link.is_open is False
        assert link.send({"x": 1}) is False

    @pytest.mark.asyncio
    async def test_open_and_send(self, connect, fake_ws: FakeWebSocket) -> None:
        link = RelayConnection(URL)
        await link.open()
        connect.assert_awaited_once_with(URL)
        assert link.is_open

        assert link.send({"x": 1, "y": 2}) is True
        await settle()
        assert fake_ws.sent == ['{"x":1,"y":2}']
        await link.close()

    @pytest.mark.asyncio
    async def test_open_twice_warns(
        self, connect, caplog: pytest.LogCaptureFixture
    ) -> None:
        link = RelayConnection(URL)
        await link.open()
        with caplog.at_level("WARNING", logger="spotlight_remote.client.link"):
            await link.open()
        assert connect.await_count == 1
        assert "Already connected" in caplog.text
        await link.close()

    @pytest.mark.asyncio
    async def test_unreachable_relay_raises(self) -> None:
        with patch(
            "spotlight_remote.client.link.websockets.connect",
            new=AsyncMock(side_effect=OSError("connection refused")),
        ):
            link = RelayConnection(URL)
            with pytest.raises(OSError):
                await link.open()
        assert link.is_open is False

    @pytest.mark.asyncio
    async def test_full_buffer_drops(self, connect) -> None:
        link = RelayConnection(URL, queue_size=1)
        await link.open()
        assert link.send({"x": 1}) is True
        assert link.send({"x": 2}) is False
        assert link.send({"x": 3}) is False
        assert link.dropped == 2
        await link.close()

    @pytest.mark.asyncio
    async def test_inbound_dispatched(self, connect, fake_ws: FakeWebSocket) -> None:
        link = RelayConnection(URL)
        received = []
        link.subscribe(received.append)
        await link.open()

        fake_ws.inbound.put_nowait('{"x": 5, "y": 6}')
        fake_ws.inbound.put_nowait("garbage")
        fake_ws.inbound.put_nowait('{"showPointer": true}')
        await settle()

        assert received == [{"x": 5, "y": 6}, {"showPointer": True}]
        await link.close()

    @pytest.mark.asyncio
    async def test_disposed_handler_not_called(self, connect, fake_ws: FakeWebSocket) -> None:
        link = RelayConnection(URL)
        received = []
        dispose = link.subscribe(received.append)
        await link.open()
        dispose()

        fake_ws.inbound.put_nowait('{"x": 1}')
        await settle()
        assert received == []
        await link.close()

    def test_handler_error_does_not_stop_others(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        link = RelayConnection(URL)
        received = []

        def broken(data: dict) -> None:
            raise RuntimeError("handler bug")

        link.subscribe(broken)
        link.subscribe(received.append)
        with caplog.at_level("ERROR", logger="spotlight_remote.client.link"):
            link.dispatch('{"x": 1}')

        assert received == [{"x": 1}]
        assert "Message handler failed" in caplog.text

    @pytest.mark.asyncio
    async def test_remote_close_closes_link(self, connect, fake_ws: FakeWebSocket) -> None:
        link = RelayConnection(URL)
        await link.open()

        fake_ws.inbound.put_nowait(None)
        await asyncio.wait_for(link.wait_closed(), timeout=1)

        assert link.is_open is False
        assert link.send({"x": 1}) is False
        await link.close()

    @pytest.mark.asyncio
    async def test_write_failure_closes_link(self, connect, fake_ws: FakeWebSocket) -> None:
        link = RelayConnection(URL)
        await link.open()
        fake_ws.fail = True

        link.send({"x": 1})
        await asyncio.wait_for(link.wait_closed(), timeout=1)
        assert link.is_open is False
        await link.close()

    @pytest.mark.asyncio
    async def test_close(self, connect, fake_ws: FakeWebSocket) -> None:
        link = RelayConnection(URL)
        await link.open()
        await link.close()

        assert fake_ws.closed
        assert link.is_open is False
        await asyncio.wait_for(link.wait_closed(), timeout=1)
        await link.close()

    @pytest.mark.asyncio
    async def test_flush_waits_for_writer(self, connect, fake_ws: FakeWebSocket) -> None:
        link = RelayConnection(URL)
        await link.open()
        for i in range(5):
            link.send({"x": i})
        await link.flush(timeout=1)
        assert len(fake_ws.sent) == 5
        await link.close()

    @pytest.mark.asyncio
    async def test_flush_on_closed_link_returns(self) -> None:
        await RelayConnection(URL).flush()
