"""Broadcast relay: forwards each message to every other connected peer."""

from spotlight_remote.relay.app import create_app, serve
from spotlight_remote.relay.hub import BroadcastHub, RelayLink

__all__ = [
    "BroadcastHub",
    "RelayLink",
    "create_app",
    "serve",
]
