"""Client pipeline: role state machine, sensor sampling, smoothing and sync."""

from spotlight_remote.client.animator import FrameLoop, SmoothingAnimator
from spotlight_remote.client.calibration import CalibrationEngine
from spotlight_remote.client.link import Link, RelayConnection
from spotlight_remote.client.mapper import MotionMapper
from spotlight_remote.client.publisher import SyncPublisher
from spotlight_remote.client.render import ConsoleRenderer, NullRenderer, Renderer
from spotlight_remote.client.sensors import (
    ReplaySensorSource,
    ScriptedSensorSource,
    SensorSampler,
    SensorSource,
)
from spotlight_remote.client.session import PointerSession
from spotlight_remote.client.state import (
    AccelerationSample,
    ClientState,
    Diagnostics,
    DisplayBounds,
    OrientationSample,
    PermissionState,
    PointerState,
    Role,
)
from spotlight_remote.client.throttle import Throttle

__all__ = [
    "AccelerationSample",
    "CalibrationEngine",
    "ClientState",
    "ConsoleRenderer",
    "Diagnostics",
    "DisplayBounds",
    "FrameLoop",
    "Link",
    "MotionMapper",
    "NullRenderer",
    "OrientationSample",
    "PermissionState",
    "PointerSession",
    "PointerState",
    "RelayConnection",
    "Renderer",
    "ReplaySensorSource",
    "Role",
    "ScriptedSensorSource",
    "SensorSampler",
    "SensorSource",
    "SmoothingAnimator",
    "SyncPublisher",
    "Throttle",
]
