"""Sync publisher: rate-limits outbound pointer state."""

from __future__ import annotations

import logging

from spotlight_remote.client.link import Link
from spotlight_remote.client.state import ClientState, MotionSample, PointerState
from spotlight_remote.client.throttle import Clock, Throttle
from spotlight_remote.protocol import position_message, visibility_message

logger = logging.getLogger(__name__)


class SyncPublisher:
    """Sends pointer updates over the link at a bounded rate.

    Position messages go out only while the pointer is visible, at most
    once per *interval*; those arriving too soon are dropped, not queued.
    Visibility changes bypass the throttle and are sent immediately.
    """

    def __init__(
        self,
        link: Link,
        state: ClientState,
        interval: float = 0.1,
        clock: Clock | None = None,
        include_diagnostics: bool = True,
    ) -> None:
        self._link = link
        self._state = state
        self._throttle = Throttle(interval, clock)
        self._include_diagnostics = include_diagnostics
        self.sent = 0

    def publish_position(self, target: PointerState, sample: MotionSample | None = None) -> bool:
        """Send *target* if visible and the publish interval has elapsed."""
        if not self._state.visible:
            return False
        if not self._throttle.ready():
            return False

        diagnostics = None
        if self._include_diagnostics and sample is not None:
            diagnostics = {sample.diagnostic_key: sample.diagnostics()}
        if self._link.send(position_message(target.x, target.y, diagnostics)):
            self.sent += 1
            return True
        return False

    def publish_visibility(self, visible: bool) -> bool:
        """Send a visibility change right away."""
        logger.debug("Publishing visibility=%s", visible)
        sent = self._link.send(visibility_message(visible))
        if sent:
            self.sent += 1
        return sent
