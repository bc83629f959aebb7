"""Minimum-interval gate shared by the sampler and the publisher."""

from __future__ import annotations

import time
from collections.abc import Callable

Clock = Callable[[], float]


class Throttle:
    """Accept at most one event per *interval* seconds.

    Each call to :meth:`ready` compares the clock against the last
    accepted time; events arriving too soon are rejected, not deferred.
    """

    def __init__(self, interval: float, clock: Clock | None = None) -> None:
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self._interval = interval
        self._clock = clock or time.monotonic
        self._last: float | None = None

    @property
    def interval(self) -> float:
        return self._interval

    def ready(self) -> bool:
        """Return True and record the time if the interval has elapsed."""
        now = self._clock()
        if self._last is not None and now - self._last < self._interval:
            return False
        self._last = now
        return True

    def reset(self) -> None:
        """Forget the last accepted time so the next event passes."""
        self._last = None
