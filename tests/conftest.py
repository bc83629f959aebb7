"""Shared test fixtures for the Spotlight Remote test suite."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from spotlight_remote.client.sensors import ScriptedSensorSource
from spotlight_remote.client.state import (
    Diagnostics,
    DisplayBounds,
    Disposer,
    PointerState,
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLink:
    """In-memory link: records sends, lets tests push inbound messages."""

    def __init__(self, is_open: bool = True) -> None:
        self.is_open = is_open
        self.sent: list[dict[str, Any]] = []
        self._handlers: list = []

    def send(self, message: dict[str, Any]) -> bool:
        if not self.is_open:
            return False
        self.sent.append(message)
        return True

    def subscribe(self, handler) -> Disposer:
        self._handlers.append(handler)

        def dispose() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return dispose

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def deliver(self, message: dict[str, Any]) -> None:
        for handler in list(self._handlers):
            handler(message)

    def positions(self) -> list[dict[str, Any]]:
        return [m for m in self.sent if "x" in m]


class RecordingRenderer:
    """Renderer that remembers what it was asked to draw."""

    def __init__(self) -> None:
        self.frames: list[tuple[PointerState, bool]] = []
        self.diagnostics: list[Diagnostics] = []

    def render_pointer(self, position: PointerState, visible: bool) -> None:
        self.frames.append((position, visible))

    def render_diagnostics(self, diagnostics: Diagnostics) -> None:
        self.diagnostics.append(diagnostics)


async def settle(rounds: int = 5) -> None:
    """Let background tasks on the loop run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def link() -> FakeLink:
    return FakeLink()


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def sensors() -> ScriptedSensorSource:
    return ScriptedSensorSource()


@pytest.fixture
def bounds() -> DisplayBounds:
    return DisplayBounds(800, 600)
