"""
Pointer Protocol

Wire format shared by controllers, presentations and the relay. Every
message is one JSON object; all fields are optional and additive:

    x, y              target pointer position in destination-screen pixels
    showPointer       visibility toggle
    action            legacy visibility toggle ("showPointer" / "hidePointer")
    motionData        diagnostic acceleration snapshot (stringified numbers)
    orientationData   diagnostic orientation snapshot (stringified numbers)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

SHOW_ACTION = "showPointer"
HIDE_ACTION = "hidePointer"


class ProtocolError(ValueError):
    """Raised when a payload is not a well-formed pointer message."""


def parse_payload(raw: str | bytes) -> dict[str, Any]:
    """Decode *raw* into a message dict.

    Raises:
        ProtocolError: If *raw* is not JSON or not a JSON object.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ProtocolError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ProtocolError(f"expected a JSON object, got {type(data).__name__}")
    return data


def encode(message: dict[str, Any]) -> str:
    """Serialize a message dict to its wire form."""
    return json.dumps(message, separators=(",", ":"))


def position_message(
    x: float,
    y: float,
    diagnostics: dict[str, dict[str, str]] | None = None,
) -> dict[str, Any]:
    """Build a target-position message, optionally carrying a diagnostic snapshot."""
    message: dict[str, Any] = {"x": x, "y": y}
    if diagnostics:
        message.update(diagnostics)
    return message


def visibility_message(visible: bool) -> dict[str, Any]:
    """Build a visibility toggle message."""
    return {"showPointer": visible}


def _number(value: Any) -> float | None:
    # bool is an int subclass; a stray ``true`` must not move the pointer
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)


def _snapshot(value: Any) -> dict[str, str] | None:
    if not isinstance(value, dict):
        return None
    return {str(k): str(v) for k, v in value.items()}


@dataclass
class PointerUpdate:
    """The recognised subset of an inbound message.

    ``None`` means "field absent or unusable": receivers leave the
    corresponding state unchanged.
    """

    x: float | None = None
    y: float | None = None
    visible: bool | None = None
    motion: dict[str, str] | None = None
    orientation: dict[str, str] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> PointerUpdate:
        """Extract recognised fields from a decoded message, ignoring the rest."""
        visible: bool | None = None
        action = data.get("action")
        if action == SHOW_ACTION:
            visible = True
        elif action == HIDE_ACTION:
            visible = False
        show = data.get("showPointer")
        if isinstance(show, bool):
            visible = show

        known = {"x", "y", "showPointer", "action", "motionData", "orientationData"}
        return cls(
            x=_number(data.get("x")),
            y=_number(data.get("y")),
            visible=visible,
            motion=_snapshot(data.get("motionData")),
            orientation=_snapshot(data.get("orientationData")),
            extra={k: v for k, v in data.items() if k not in known},
        )

    @property
    def has_position(self) -> bool:
        return self.x is not None or self.y is not None

    def is_empty(self) -> bool:
        """True when the message carried nothing a presentation can apply."""
        return (
            not self.has_position
            and self.visible is None
            and self.motion is None
            and self.orientation is None
        )
