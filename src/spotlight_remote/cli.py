"""CLI entry points for Spotlight Remote.

Commands:
    spotlight relay         Run the broadcast relay server
    spotlight controller    Drive the remote pointer from recorded motion samples
    spotlight presentation  Render the pointer received from a controller
    spotlight config        Show, get, or set configuration values
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.live import Live
from rich.table import Table

from spotlight_remote.client.link import RelayConnection
from spotlight_remote.client.render import ConsoleRenderer
from spotlight_remote.client.sensors import ReplaySensorSource
from spotlight_remote.client.session import PointerSession
from spotlight_remote.client.state import DisplayBounds, Role
from spotlight_remote.config import ConfigManager, SpotlightConfig
from spotlight_remote.config.manager import get_value, set_value
from spotlight_remote.logging import setup_logging

console = Console()
app = typer.Typer(
    name="spotlight",
    help="Steer a presentation spotlight from a phone's motion sensors.",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Show, get, or set configuration values.")
app.add_typer(config_app, name="config")

logger = logging.getLogger(__name__)


def _load_config() -> SpotlightConfig:
    try:
        return ConfigManager().load()
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration:[/red]\n{exc}")
        raise typer.Exit(1) from exc


def _setup_logging(config: SpotlightConfig, verbose: bool = False) -> None:
    level = "DEBUG" if verbose else config.logging.level
    setup_logging(level=level, log_file=config.logging.get_log_path())


def _bounds(config: SpotlightConfig) -> DisplayBounds:
    return DisplayBounds(config.display.width, config.display.height)


# ------------------------------------------------------------------
# spotlight relay
# ------------------------------------------------------------------


@app.command()
def relay(
    host: str | None = typer.Option(None, "--host", help="Interface to bind"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Run the broadcast relay server."""
    from spotlight_remote.relay import serve

    config = _load_config()
    _setup_logging(config, verbose)
    updates = {k: v for k, v in {"host": host, "port": port}.items() if v is not None}
    if updates:
        config.relay = config.relay.model_copy(update=updates)

    console.print(
        f"[bold cyan]Relay listening on ws://{config.relay.host}:{config.relay.port}"
        f"{config.relay.path}[/bold cyan]"
    )
    serve(config)


# ------------------------------------------------------------------
# spotlight controller / presentation
# ------------------------------------------------------------------


async def _run_controller(config: SpotlightConfig, source: ReplaySensorSource, show: bool) -> int:
    link = RelayConnection(config.client.relay_url, config.client.send_queue_size)
    await link.open()
    with Live(console=console, refresh_per_second=10) as live:
        session = PointerSession(
            link,
            source,
            ConsoleRenderer(live, title="Controller"),
            config.client,
            _bounds(config),
        )
        session.mount()
        await session.set_role(Role.CONTROLLER)
        if show:
            session.set_visibility(True)

        replay = asyncio.ensure_future(source.run())
        closed = asyncio.ensure_future(link.wait_closed())
        try:
            await asyncio.wait({replay, closed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closed.cancel()
            replay.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await replay
            session.set_visibility(False)
            await link.flush()
            await session.unmount()
            await link.close()

    return source.emitted


async def _run_presentation(config: SpotlightConfig) -> None:
    link = RelayConnection(config.client.relay_url, config.client.send_queue_size)
    await link.open()
    with Live(console=console, refresh_per_second=30) as live:
        session = PointerSession(
            link,
            ReplaySensorSource([]),
            ConsoleRenderer(live, title="Presentation"),
            config.client,
            _bounds(config),
        )
        session.mount()
        try:
            await link.wait_closed()
        finally:
            await session.unmount()
            await link.close()


@app.command()
def controller(
    replay: Path = typer.Argument(..., help="JSON-lines sample file ('-' for stdin)"),
    url: str | None = typer.Option(None, "--url", "-u", help="Relay WebSocket URL"),
    show: bool = typer.Option(True, "--show/--no-show", help="Show the pointer while replaying"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Drive the remote pointer from recorded motion samples."""
    config = _load_config()
    _setup_logging(config, verbose)
    if url:
        config.client = config.client.model_copy(update={"relay_url": url})

    if str(replay) == "-":
        source = ReplaySensorSource.from_stream(sys.stdin)
    elif replay.is_file():
        source = ReplaySensorSource.from_path(replay)
    else:
        console.print(f"[red]Replay file not found: {replay}[/red]")
        raise typer.Exit(1)

    try:
        emitted = asyncio.run(_run_controller(config, source, show))
    except OSError as exc:
        console.print(f"[red]Could not reach relay at {config.client.relay_url}: {exc}[/red]")
        raise typer.Exit(1) from exc
    except KeyboardInterrupt:
        raise typer.Exit(0) from None
    console.print(f"[green]Replayed {emitted} sample(s).[/green]")


@app.command()
def presentation(
    url: str | None = typer.Option(None, "--url", "-u", help="Relay WebSocket URL"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Render the pointer received from a controller."""
    config = _load_config()
    _setup_logging(config, verbose)
    if url:
        config.client = config.client.model_copy(update={"relay_url": url})

    try:
        asyncio.run(_run_presentation(config))
    except OSError as exc:
        console.print(f"[red]Could not reach relay at {config.client.relay_url}: {exc}[/red]")
        raise typer.Exit(1) from exc
    except KeyboardInterrupt:
        raise typer.Exit(0) from None
    console.print("[yellow]Relay connection closed.[/yellow]")


# ------------------------------------------------------------------
# spotlight config show / get / set
# ------------------------------------------------------------------


@config_app.command("show")
def config_show() -> None:
    """Print every configuration value."""
    manager = ConfigManager()
    config = _load_config()

    table = Table(title="Spotlight Config", border_style="cyan")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for section, values in config.model_dump().items():
        for key, value in values.items():
            table.add_row(f"{section}.{key}", str(value))
    console.print(table)
    source = manager.get_config_path() if manager.exists() else "defaults"
    console.print(f"[dim]Source: {source}[/dim]")


@config_app.command("get")
def config_get(key: str = typer.Argument(..., help="Dotted key, e.g. client.ease")) -> None:
    """Print a single configuration value."""
    config = _load_config()
    try:
        console.print(str(get_value(config, key)))
    except KeyError as exc:
        console.print(f"[red]Unknown config key: {key}[/red]")
        raise typer.Exit(1) from exc


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Dotted key, e.g. relay.port"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set a configuration value and save it."""
    manager = ConfigManager()
    config = _load_config()
    try:
        updated = set_value(config, key, value)
    except KeyError as exc:
        console.print(f"[red]Unknown config key: {key}[/red]")
        raise typer.Exit(1) from exc
    except ValidationError as exc:
        console.print(f"[red]Invalid value for {key}:[/red] {exc.errors()[0]['msg']}")
        raise typer.Exit(1) from exc

    manager.save(updated)
    console.print(f"[green]{key} = {get_value(updated, key)}[/green]")
