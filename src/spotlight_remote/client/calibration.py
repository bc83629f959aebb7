"""Calibration engine: captures the orientation baseline used to zero tilt."""

from __future__ import annotations

import logging
from collections.abc import Callable

from spotlight_remote.client.sensors import SensorSource
from spotlight_remote.client.state import Disposer, MotionSample, OrientationSample

logger = logging.getLogger(__name__)


class CalibrationEngine:
    """Holds at most one calibration reference per controller session.

    :meth:`calibrate` opens a short-lived subscription on the raw source
    (independent of the throttled sampler). The first orientation sample
    with both ``beta`` and ``gamma`` present becomes the reference. Samples
    missing either field leave the previous reference in place; after
    *max_attempts* such samples the subscription closes without a new
    reference. There is no timeout.
    """

    def __init__(self, source: SensorSource, max_attempts: int = 3) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._source = source
        self._max_attempts = max_attempts
        self._reference: OrientationSample | None = None
        self._dispose: Disposer | None = None
        self._attempts = 0

    @property
    def reference(self) -> OrientationSample | None:
        return self._reference

    @property
    def pending(self) -> bool:
        """True while waiting for a calibration sample."""
        return self._dispose is not None

    def calibrate(
        self,
        on_calibrated: Callable[[OrientationSample], None] | None = None,
    ) -> Disposer:
        """Arm a one-shot subscription for the next qualifying sample."""
        self.cancel()
        self._attempts = 0

        def on_sample(sample: MotionSample) -> None:
            if not isinstance(sample, OrientationSample):
                return
            self._attempts += 1
            if sample.has_tilt:
                self._reference = sample
                self.cancel()
                logger.info(
                    "Calibrated at beta=%.2f gamma=%.2f", sample.beta, sample.gamma
                )
                if on_calibrated is not None:
                    on_calibrated(sample)
            elif self._attempts >= self._max_attempts:
                self.cancel()
                logger.debug(
                    "Calibration skipped: no tilt data in %d sample(s)", self._attempts
                )

        self._dispose = self._source.subscribe(on_sample)
        return self.cancel

    def cancel(self) -> None:
        """Close a pending calibration subscription, keeping the reference."""
        if self._dispose is not None:
            self._dispose()
            self._dispose = None

    def clear(self) -> None:
        """Drop the reference and any pending subscription."""
        self.cancel()
        self._reference = None
