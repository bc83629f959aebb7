"""
Pointer Session

Role state machine and pointer pipeline for one client. A session owns the
link subscription, the frame loop and, while in the controller role, the
sensor subscriptions. Every callback runs on the same event loop and reads
the one :class:`ClientState` snapshot.

Controller flow:
    sensor → sampler (throttle) → calibration/mapper → target
        → publisher (throttle, visible only) → link
Presentation flow:
    link → handle_inbound → target
Both roles:
    frame loop → animator → rendered → renderer
"""

from __future__ import annotations

import logging
from typing import Any

from spotlight_remote.client.animator import FrameLoop, SmoothingAnimator
from spotlight_remote.client.calibration import CalibrationEngine
from spotlight_remote.client.link import Link
from spotlight_remote.client.mapper import MotionMapper
from spotlight_remote.client.publisher import SyncPublisher
from spotlight_remote.client.render import Renderer
from spotlight_remote.client.sensors import SensorSampler, SensorSource
from spotlight_remote.client.state import (
    ClientState,
    DisplayBounds,
    Disposer,
    MotionSample,
    OrientationSample,
    PermissionState,
    Role,
)
from spotlight_remote.client.throttle import Clock
from spotlight_remote.config.schema import ClientSection
from spotlight_remote.protocol import PointerUpdate

logger = logging.getLogger(__name__)


class PointerSession:
    """One client's role, pointer state and pipeline wiring."""

    def __init__(
        self,
        link: Link,
        sensors: SensorSource,
        renderer: Renderer,
        settings: ClientSection | None = None,
        bounds: DisplayBounds | None = None,
        clock: Clock | None = None,
    ) -> None:
        settings = settings or ClientSection()
        self.link = link
        self.sensors = sensors
        self.renderer = renderer
        self.settings = settings
        self.state = ClientState(bounds=bounds or DisplayBounds(1920, 1080))
        self.state.diagnostics.permission = sensors.permission

        self.sampler = SensorSampler(sensors, settings.sample_interval, clock)
        self.calibration = CalibrationEngine(sensors, settings.calibration_attempts)
        self.mapper = MotionMapper(self.state.bounds, settings.sensitivity)
        self.animator = SmoothingAnimator(settings.ease)
        self.publisher = SyncPublisher(
            link,
            self.state,
            settings.publish_interval,
            clock,
            include_diagnostics=settings.include_diagnostics,
        )
        self.frames = FrameLoop(self.tick, settings.frame_rate)
        self._link_dispose: Disposer | None = None
        self._mounted = False

    @property
    def role(self) -> Role:
        return self.state.role

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self) -> None:
        """Start listening to the link and drawing frames."""
        if self._mounted:
            return
        self._link_dispose = self.link.subscribe(self.handle_inbound)
        self.frames.start()
        self._mounted = True
        self.renderer.render_diagnostics(self.state.diagnostics)

    async def unmount(self) -> None:
        """Dispose every subscription and stop the frame loop."""
        if not self._mounted:
            return
        self._mounted = False
        self._stop_controller()
        if self._link_dispose is not None:
            self._link_dispose()
            self._link_dispose = None
        await self.frames.aclose()

    # ------------------------------------------------------------------
    # Role state machine
    # ------------------------------------------------------------------

    async def toggle_role(self) -> Role:
        """Switch between controller and presentation."""
        return await self.set_role(self.state.role.toggled())

    async def set_role(self, role: Role) -> Role:
        """Enter *role*, running the exit and entry side effects."""
        if role is self.state.role:
            return role

        if self.state.role is Role.CONTROLLER:
            self._leave_controller()

        self.state.role = role
        logger.info("Role changed to %s", role.value)

        if role is Role.CONTROLLER:
            await self._enter_controller()

        if self._mounted:
            self.frames.stop()
            self.frames.start()
        return role

    async def _enter_controller(self) -> None:
        permission = self.sensors.permission
        if permission is PermissionState.UNKNOWN:
            permission = await self.sensors.request_permission()
        self.state.diagnostics.permission = permission
        self.renderer.render_diagnostics(self.state.diagnostics)

        if not permission.allows_sampling:
            logger.warning("Sensor permission %s: pointer will not move", permission.value)
            return
        self.sampler.start(self.handle_sample)

    def _leave_controller(self) -> None:
        if self.state.visible:
            self.publisher.publish_visibility(False)
        self._stop_controller()

    def _stop_controller(self) -> None:
        self.sampler.stop()
        self.calibration.clear()
        self.state.visible = False
        self.state.reset_pointer()

    # ------------------------------------------------------------------
    # Controller side
    # ------------------------------------------------------------------

    def set_visibility(self, visible: bool) -> bool:
        """Show or hide the remote pointer.

        Returns:
            False when not in the controller role (nothing happens).
        """
        if self.state.role is not Role.CONTROLLER:
            return False
        if visible == self.state.visible:
            return True
        self.state.visible = visible
        self.publisher.publish_visibility(visible)
        if visible and self.settings.sensor_mode == "orientation":
            self.calibration.calibrate(self._on_calibrated)
        elif not visible:
            self.calibration.cancel()
        return True

    def _on_calibrated(self, reference: OrientationSample) -> None:
        # Rendered restarts from the target when a new baseline is taken.
        self.state.rendered = self.state.target

    def handle_sample(self, sample: MotionSample) -> None:
        """Process one throttled sensor sample."""
        if self.state.role is not Role.CONTROLLER:
            return
        self.state.diagnostics.record_sample(sample)
        self.renderer.render_diagnostics(self.state.diagnostics)

        if not self.state.visible:
            return
        if isinstance(sample, OrientationSample):
            # A pending calibration means the reference is stale or missing.
            if self.calibration.pending or self.calibration.reference is None:
                return
            target = self.mapper.apply(self.state.target, sample, self.calibration.reference)
        else:
            target = self.mapper.apply(self.state.target, sample)
        self.state.target = target
        self.publisher.publish_position(target, sample)

    # ------------------------------------------------------------------
    # Presentation side
    # ------------------------------------------------------------------

    def handle_inbound(self, data: dict[str, Any]) -> None:
        """Apply an inbound relay message. Ignored outside the presentation role."""
        if self.state.role is not Role.PRESENTATION:
            return
        update = PointerUpdate.from_payload(data)
        if update.is_empty():
            logger.debug("Ignoring message with no recognised fields: %s", data)
            return

        if update.visible is not None:
            self.state.visible = update.visible
        if update.has_position:
            current = self.state.target
            self.state.target = self.state.bounds.clamp(
                current.x if update.x is None else update.x,
                current.y if update.y is None else update.y,
            )

        diagnostics_changed = False
        if update.motion is not None:
            self.state.diagnostics.remote["motionData"] = update.motion
            diagnostics_changed = True
        if update.orientation is not None:
            self.state.diagnostics.remote["orientationData"] = update.orientation
            diagnostics_changed = True
        if diagnostics_changed:
            self.renderer.render_diagnostics(self.state.diagnostics)

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Advance the rendered position one frame and draw it."""
        self.state.rendered = self.animator.tick(self.state.rendered, self.state.target)
        self.renderer.render_pointer(self.state.rendered, self.state.visible)
