"""Motion-to-pointer mapping."""

from __future__ import annotations

from spotlight_remote.client.state import (
    AccelerationSample,
    DisplayBounds,
    MotionSample,
    OrientationSample,
    PointerState,
)

DEFAULT_SENSITIVITY = 2.0


class MotionMapper:
    """Turns sensor deltas into a bounded target position.

    The mapping accumulates onto the current target rather than mapping an
    angle to an absolute position: tilting keeps the pointer moving until
    it reaches an edge, where it is clamped until the tilt reverses.

    Orientation samples are measured against the calibration reference;
    tilting forward (increasing beta) moves the pointer down. Acceleration
    samples are used raw, with screen-y inverted.
    """

    def __init__(self, bounds: DisplayBounds, sensitivity: float = DEFAULT_SENSITIVITY) -> None:
        self.bounds = bounds
        self.sensitivity = sensitivity

    def delta(
        self,
        sample: MotionSample,
        reference: OrientationSample | None = None,
    ) -> tuple[float, float]:
        """Return ``(dx, dy)`` in pixels; zero when there is nothing to measure."""
        if isinstance(sample, OrientationSample):
            if reference is None or not reference.has_tilt or not sample.has_tilt:
                return 0.0, 0.0
            tilt = sample.beta - reference.beta
            roll = sample.gamma - reference.gamma
            return roll * self.sensitivity, tilt * self.sensitivity

        if isinstance(sample, AccelerationSample):
            dx = (sample.x or 0.0) * self.sensitivity
            dy = -(sample.y or 0.0) * self.sensitivity
            return dx, dy

        raise TypeError(f"unsupported sample type: {type(sample).__name__}")

    def apply(
        self,
        target: PointerState,
        sample: MotionSample,
        reference: OrientationSample | None = None,
    ) -> PointerState:
        """Return the new target after applying *sample*, clamped to bounds."""
        dx, dy = self.delta(sample, reference)
        return self.bounds.clamp(target.x + dx, target.y + dy)
