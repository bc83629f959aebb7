"""Tests for the renderers."""

from __future__ import annotations

from unittest.mock import MagicMock

from rich.console import Console, Group

from spotlight_remote.client.render import ConsoleRenderer, NullRenderer, Renderer
from spotlight_remote.client.state import (
    AccelerationSample,
    Diagnostics,
    PermissionState,
    PointerState,
)


def _render_text(group: Group) -> str:
    console = Console(record=True, width=100)
    console.print(group)
    return console.export_text()


def test_renderers_satisfy_protocol() -> None:
    assert isinstance(NullRenderer(), Renderer)
    assert isinstance(ConsoleRenderer(MagicMock()), Renderer)


def test_null_renderer_accepts_calls() -> None:
    renderer = NullRenderer()
    renderer.render_pointer(PointerState(1, 2), True)
    renderer.render_diagnostics(Diagnostics())


def test_console_renderer_pointer() -> None:
    live = MagicMock()
    renderer = ConsoleRenderer(live, title="Presentation")
    renderer.render_pointer(PointerState(12.34, 56.78), True)

    text = _render_text(live.update.call_args.args[0])
    assert "Presentation" in text
    assert "12.3" in text
    assert "56.8" in text
    assert "shown" in text


def test_console_renderer_diagnostics() -> None:
    live = MagicMock()
    renderer = ConsoleRenderer(live)
    diagnostics = Diagnostics(permission=PermissionState.DENIED)
    diagnostics.record_sample(AccelerationSample(0.5, None, 9.81))
    diagnostics.remote["orientationData"] = {"beta": "10.00"}

    renderer.render_diagnostics(diagnostics)

    text = _render_text(live.update.call_args.args[0])
    assert "denied" in text
    assert "motionData.y" in text
    assert "N/A" in text
    assert "orientationData.beta" in text
