"""Relay server: FastAPI application exposing the broadcast WebSocket."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect

import spotlight_remote
from spotlight_remote.config import SpotlightConfig
from spotlight_remote.relay.hub import BroadcastHub

logger = logging.getLogger(__name__)


def create_app(config: SpotlightConfig | None = None) -> FastAPI:
    """Build the relay app.

    The hub lives on ``app.state.hub`` so tests and the health route can
    inspect the connection set.
    """
    config = config or SpotlightConfig()
    hub = BroadcastHub(queue_size=config.relay.send_queue_size)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Relay listening on %s", config.relay.path)
        yield
        await hub.close_all()
        logger.info("Relay stopped")

    app = FastAPI(
        title="Spotlight Relay",
        version=spotlight_remote.__version__,
        lifespan=lifespan,
    )
    app.state.hub = hub
    app.state.config = config

    @app.get("/health")
    async def health() -> dict[str, object]:
        return {"status": "ok", **hub.get_stats()}

    @app.websocket(config.relay.path)
    async def relay_socket(websocket: WebSocket) -> None:
        await websocket.accept()
        link = hub.connect(websocket)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    logger.debug("Relay: %s closed normally", link.id)
                    break
                payload = message.get("text")
                if payload is None:
                    payload = message.get("bytes") or b""
                hub.on_message(link, payload)
        except WebSocketDisconnect:
            logger.debug("Relay: %s closed normally", link.id)
        except Exception as e:
            logger.error("Relay: connection error for %s: %s", link.id, e)
        finally:
            await hub.disconnect(link)

    return app


def serve(config: SpotlightConfig) -> None:
    """Run the relay with uvicorn until interrupted."""
    app = create_app(config)
    uvicorn.run(
        app,
        host=config.relay.host,
        port=config.relay.port,
        log_level=config.logging.level.lower(),
    )
