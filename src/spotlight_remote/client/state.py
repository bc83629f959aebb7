"""Client-side data model: roles, pointer positions, sensor samples."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

MISSING = "N/A"

Disposer = Callable[[], None]


class Role(Enum):
    """A client's local choice of input or output side. Never transmitted."""

    CONTROLLER = "controller"
    PRESENTATION = "presentation"

    def toggled(self) -> Role:
        if self is Role.CONTROLLER:
            return Role.PRESENTATION
        return Role.CONTROLLER


class PermissionState(Enum):
    """Whether the sensor API needs, and has received, a user grant."""

    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"
    NOT_REQUIRED = "not_required"

    @property
    def allows_sampling(self) -> bool:
        return self in (PermissionState.GRANTED, PermissionState.NOT_REQUIRED)


@dataclass(frozen=True)
class PointerState:
    """A pointer position in destination-screen pixels."""

    x: float
    y: float


@dataclass(frozen=True)
class DisplayBounds:
    """Size of the display a pointer is drawn on."""

    width: float
    height: float

    def clamp(self, x: float, y: float) -> PointerState:
        return PointerState(
            x=min(max(x, 0.0), self.width),
            y=min(max(y, 0.0), self.height),
        )

    def center(self) -> PointerState:
        return PointerState(x=self.width / 2, y=self.height / 2)


def _fmt(value: float | None) -> str:
    return MISSING if value is None else f"{value:.2f}"


@dataclass(frozen=True)
class OrientationSample:
    """Device orientation in degrees. Missing readings are ``None``."""

    alpha: float | None = None
    beta: float | None = None
    gamma: float | None = None

    diagnostic_key = "orientationData"

    @property
    def has_tilt(self) -> bool:
        """True when both beta and gamma were reported."""
        return self.beta is not None and self.gamma is not None

    def diagnostics(self) -> dict[str, str]:
        return {"alpha": _fmt(self.alpha), "beta": _fmt(self.beta), "gamma": _fmt(self.gamma)}


@dataclass(frozen=True)
class AccelerationSample:
    """Linear acceleration including gravity, in m/s². Missing readings are ``None``."""

    x: float | None = None
    y: float | None = None
    z: float | None = None

    diagnostic_key = "motionData"

    def diagnostics(self) -> dict[str, str]:
        return {"x": _fmt(self.x), "y": _fmt(self.y), "z": _fmt(self.z)}


MotionSample = OrientationSample | AccelerationSample


@dataclass
class Diagnostics:
    """Values shown by the diagnostic display."""

    permission: PermissionState = PermissionState.UNKNOWN
    local: dict[str, dict[str, str]] = field(default_factory=dict)
    remote: dict[str, dict[str, str]] = field(default_factory=dict)

    def record_sample(self, sample: MotionSample) -> None:
        self.local[sample.diagnostic_key] = sample.diagnostics()


@dataclass
class ClientState:
    """The one snapshot of client state every callback reads and writes.

    All callbacks run on the same event loop, so reads are always current.
    """

    bounds: DisplayBounds
    role: Role = Role.PRESENTATION
    visible: bool = False
    target: PointerState | None = None
    rendered: PointerState | None = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def __post_init__(self) -> None:
        if self.target is None:
            self.target = self.bounds.center()
        if self.rendered is None:
            self.rendered = self.target

    def reset_pointer(self) -> None:
        """Move both target and rendered back to the display center."""
        self.target = self.rendered = self.bounds.center()
