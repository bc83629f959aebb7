"""Rendering collaborators the pointer pipeline draws through."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rich.console import Group
from rich.live import Live
from rich.table import Table
from rich.text import Text

from spotlight_remote.client.state import Diagnostics, PointerState


@runtime_checkable
class Renderer(Protocol):
    """Anything that can draw the pointer and the diagnostic fields."""

    def render_pointer(self, position: PointerState, visible: bool) -> None:
        """Draw (or hide) the spotlight at *position*."""

    def render_diagnostics(self, diagnostics: Diagnostics) -> None:
        """Show raw sensor values and the permission state."""


class NullRenderer:
    """Renderer that draws nothing."""

    def render_pointer(self, position: PointerState, visible: bool) -> None:
        pass

    def render_diagnostics(self, diagnostics: Diagnostics) -> None:
        pass


class ConsoleRenderer:
    """Terminal renderer built on a rich ``Live`` display.

    Pointer frames arrive at the frame rate; the table is refreshed by
    ``Live`` at its own cadence, so drawing here only swaps the renderable.
    """

    def __init__(self, live: Live, title: str = "Spotlight") -> None:
        self._live = live
        self._title = title
        self._position = PointerState(0.0, 0.0)
        self._visible = False
        self._diagnostics = Diagnostics()

    def render_pointer(self, position: PointerState, visible: bool) -> None:
        self._position = position
        self._visible = visible
        self._live.update(self._build())

    def render_diagnostics(self, diagnostics: Diagnostics) -> None:
        self._diagnostics = diagnostics
        self._live.update(self._build())

    def _build(self) -> Group:
        pointer = Table(title=self._title, border_style="cyan")
        pointer.add_column("Pointer", style="bold")
        pointer.add_column("Value")
        pointer.add_row("x", f"{self._position.x:.1f}")
        pointer.add_row("y", f"{self._position.y:.1f}")
        shown = "[green]shown[/green]" if self._visible else "[dim]hidden[/dim]"
        pointer.add_row("spotlight", shown)

        diag = Table(title="Diagnostics", border_style="dim")
        diag.add_column("Source", style="bold")
        diag.add_column("Field")
        diag.add_column("Value")
        diag.add_row("sensor", "permission", self._diagnostics.permission.value)
        for origin, snapshots in (
            ("local", self._diagnostics.local),
            ("remote", self._diagnostics.remote),
        ):
            for key, values in snapshots.items():
                for name, value in values.items():
                    diag.add_row(origin, f"{key}.{name}", value)

        return Group(pointer, Text(""), diag)
