"""Smoothing animator and the per-frame loop that drives it."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from spotlight_remote.client.state import PointerState

logger = logging.getLogger(__name__)

DEFAULT_EASE = 0.15


class SmoothingAnimator:
    """Eases a rendered position toward the target on every frame.

    Smaller *ease* values give smoother but laggier motion. Each tick
    closes the fraction *ease* of the remaining gap, so a gap of ``d``
    shrinks below ``eps`` after about ``log(eps/d) / log(1 - ease)`` ticks.
    """

    def __init__(self, ease: float = DEFAULT_EASE) -> None:
        if not 0 < ease < 1:
            raise ValueError("ease must be in (0, 1)")
        self.ease = ease

    def tick(self, rendered: PointerState, target: PointerState) -> PointerState:
        return PointerState(
            x=rendered.x + (target.x - rendered.x) * self.ease,
            y=rendered.y + (target.y - rendered.y) * self.ease,
        )


class FrameLoop:
    """Calls *callback* once per frame on the running event loop.

    The loop is independent of sensor and network activity. It is
    cancellable: :meth:`stop` cancels the task so no orphaned update
    cycle outlives its owner.
    """

    def __init__(self, callback: Callable[[], None], frame_rate: int = 60) -> None:
        if frame_rate <= 0:
            raise ValueError("frame_rate must be positive")
        self._callback = callback
        self._interval = 1.0 / frame_rate
        self._task: asyncio.Task[None] | None = None
        self.frames = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def aclose(self) -> None:
        """Stop and wait for the task to finish unwinding."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _run(self) -> None:
        while True:
            try:
                self._callback()
            except Exception:
                logger.exception("Frame callback failed")
            self.frames += 1
            await asyncio.sleep(self._interval)
