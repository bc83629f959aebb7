"""
Sensor Sources

A sensor source pushes motion samples into the client on the event loop.
Real devices are represented by anything satisfying :class:`SensorSource`;
this module ships a scriptable source (tests, simulations) and a replay
source that plays back recorded JSON lines.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import IO, Any, Protocol, runtime_checkable

from spotlight_remote.client.state import (
    AccelerationSample,
    Disposer,
    MotionSample,
    OrientationSample,
    PermissionState,
)
from spotlight_remote.client.throttle import Clock, Throttle

logger = logging.getLogger(__name__)

SampleCallback = Callable[[MotionSample], None]


@runtime_checkable
class SensorSource(Protocol):
    """Protocol every motion/orientation provider must satisfy."""

    @property
    def permission(self) -> PermissionState:
        """Current permission state of the sensor API."""

    async def request_permission(self) -> PermissionState:
        """Ask the user (or platform) for sensor access."""

    def subscribe(self, callback: SampleCallback) -> Disposer:
        """Deliver every raw sample to *callback* until the disposer is called."""


class ScriptedSensorSource:
    """A source whose samples are pushed by calling :meth:`emit`.

    Args:
        grant: Permission outcome returned by :meth:`request_permission`.
    """

    def __init__(self, grant: PermissionState = PermissionState.NOT_REQUIRED) -> None:
        self._grant = grant
        self._permission = (
            PermissionState.NOT_REQUIRED
            if grant is PermissionState.NOT_REQUIRED
            else PermissionState.UNKNOWN
        )
        self._subscribers: list[SampleCallback] = []

    @property
    def permission(self) -> PermissionState:
        return self._permission

    async def request_permission(self) -> PermissionState:
        self._permission = self._grant
        return self._permission

    def subscribe(self, callback: SampleCallback) -> Disposer:
        self._subscribers.append(callback)

        def dispose() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return dispose

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def emit(self, sample: MotionSample) -> None:
        """Deliver *sample* to every current subscriber.

        Nothing is delivered until permission allows sampling.
        """
        if not self._permission.allows_sampling:
            return
        # Copy: one-shot subscribers dispose themselves mid-iteration.
        for callback in list(self._subscribers):
            callback(sample)


def sample_from_dict(data: dict[str, Any]) -> MotionSample:
    """Build a sample from a recorded JSON object.

    Objects carrying any of ``alpha``/``beta``/``gamma`` are orientation
    samples; anything else is read as acceleration ``x``/``y``/``z``.
    """

    def num(key: str) -> float | None:
        value = data.get(key)
        if isinstance(value, bool) or not isinstance(value, int | float):
            return None
        return float(value)

    if {"alpha", "beta", "gamma"} & data.keys():
        return OrientationSample(alpha=num("alpha"), beta=num("beta"), gamma=num("gamma"))
    return AccelerationSample(x=num("x"), y=num("y"), z=num("z"))


class ReplaySensorSource(ScriptedSensorSource):
    """Plays back JSON-lines samples, one per line.

    Each line may carry a ``delay`` (seconds to wait before emitting it);
    lines without one use *default_delay*. Blank and malformed lines are
    skipped with a warning.
    """

    def __init__(self, lines: Iterable[str], default_delay: float = 0.016) -> None:
        super().__init__(PermissionState.NOT_REQUIRED)
        self._lines = lines
        self._default_delay = default_delay
        self.emitted = 0

    @classmethod
    def from_path(cls, path: Path, default_delay: float = 0.016) -> ReplaySensorSource:
        return cls(path.read_text(encoding="utf-8").splitlines(), default_delay)

    @classmethod
    def from_stream(cls, stream: IO[str], default_delay: float = 0.016) -> ReplaySensorSource:
        return cls(stream.read().splitlines(), default_delay)

    async def run(self) -> int:
        """Emit every sample, sleeping between them. Returns the count emitted."""
        for lineno, line in enumerate(self._lines, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Replay: skipping line %d: %s", lineno, e)
                continue
            if not isinstance(data, dict):
                logger.warning("Replay: skipping line %d: not an object", lineno)
                continue
            delay = data.get("delay", self._default_delay)
            if isinstance(delay, bool) or not isinstance(delay, int | float) or delay < 0:
                logger.warning("Replay: skipping line %d: bad delay %r", lineno, delay)
                continue
            await asyncio.sleep(delay)
            self.emit(sample_from_dict(data))
            self.emitted += 1
        return self.emitted


class SensorSampler:
    """Throttled continuous subscription to a sensor source.

    Samples arriving sooner than *interval* after the last accepted one
    are dropped before any calibration or mapping math runs.
    """

    def __init__(
        self,
        source: SensorSource,
        interval: float = 0.032,
        clock: Clock | None = None,
    ) -> None:
        self._source = source
        self._throttle = Throttle(interval, clock)
        self._dispose: Disposer | None = None

    @property
    def active(self) -> bool:
        return self._dispose is not None

    def start(self, callback: SampleCallback) -> Disposer:
        """Subscribe *callback* if permission allows; returns a disposer.

        When permission is missing the sampler stays idle (degraded mode)
        and the returned disposer does nothing.
        """
        self.stop()
        if not self._source.permission.allows_sampling:
            logger.debug("Sampler: permission %s, not subscribing", self._source.permission.value)
            return lambda: None

        def on_sample(sample: MotionSample) -> None:
            if self._throttle.ready():
                callback(sample)

        self._throttle.reset()
        self._dispose = self._source.subscribe(on_sample)
        return self.stop

    def stop(self) -> None:
        if self._dispose is not None:
            self._dispose()
            self._dispose = None
