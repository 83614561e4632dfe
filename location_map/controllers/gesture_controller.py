"""Zoom/pan state machine driven by continuous gesture input.

The controller lives on the interaction thread and is the only writer of the
map's transform state. During a gesture session every update is computed from
the baseline captured when the session began; the resulting *live* value is
published with ``liveChanged``. When the session ends the live value becomes
the *committed* value and is published with ``committed``.

Other threads never call into the controller directly: the map view reaches
the slots through queued signal connections, and state comes back the same
way.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import logging
import math
from typing import Callable

from PyQt5 import QtCore

from location_map.geometry.boundaries import constrain_state
from location_map.model.view_state import TransformState, ViewportGeometry

logger = logging.getLogger(__name__)

DEGENERATE_SCALE_FACTOR = 1e-6


class GesturePhase(Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass
class GestureSession:
    session_id: int
    baseline: TransformState
    last_timestamp: float | None = None


class GestureController(QtCore.QObject):
    """Owns the map ``TransformState`` and applies gesture deltas to it."""

    liveChanged = QtCore.pyqtSignal(object)
    committed = QtCore.pyqtSignal(object)

    def __init__(
        self,
        geometry: ViewportGeometry | None = None,
        *,
        min_scale: float = 1.0,
        max_scale: float = 3.0,
        double_tap_scale: float = 2.0,
        parent: QtCore.QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._geometry = geometry or ViewportGeometry()
        self._min_scale = min_scale
        self._max_scale = max(min_scale, max_scale)
        self._double_tap_scale = double_tap_scale
        self._committed = self._home_state()
        self._live = self._committed
        self._session: GestureSession | None = None
        self._last_session_id = 0
        self._deferred: list[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    def phase(self) -> GesturePhase:
        return GesturePhase.IDLE if self._session is None else GesturePhase.ACTIVE

    def geometry(self) -> ViewportGeometry:
        return self._geometry

    def committed_state(self) -> TransformState:
        return self._committed

    def live_state(self) -> TransformState:
        """Latest value: live during a session, committed otherwise."""
        if self._session is None:
            return self._committed
        return self._live

    current_state = live_state

    def active_session_id(self) -> int | None:
        return None if self._session is None else self._session.session_id

    def clamp_scale(self, scale: float) -> float:
        if not math.isfinite(scale):
            return self._min_scale
        return max(self._min_scale, min(self._max_scale, scale))

    # ------------------------------------------------------------------
    # Gesture session
    # ------------------------------------------------------------------
    @QtCore.pyqtSlot(int)
    def begin_gesture(self, session_id: int) -> bool:
        if session_id <= self._last_session_id:
            logger.debug("Ignoring late start of gesture session %d", session_id)
            return False
        active_id = self.active_session_id()
        if active_id is not None:
            if active_id == session_id:
                return False
            self.end_gesture(active_id)
        self._session = GestureSession(session_id=session_id, baseline=self._committed)
        self._live = self._committed
        logger.debug("Gesture session %d started at %s", session_id, self._committed)
        return True

    @QtCore.pyqtSlot(int, float, float, float, float)
    def update_gesture(
        self,
        session_id: int,
        timestamp: float,
        scale_factor: float = 1.0,
        dx: float = 0.0,
        dy: float = 0.0,
    ) -> bool:
        """Apply cumulative pinch factor and pan delta for ``session_id``."""
        session = self._session
        if session is None or session.session_id != session_id:
            logger.debug("Dropping update for inactive gesture session %d", session_id)
            return False
        if session.last_timestamp is not None and timestamp <= session.last_timestamp:
            logger.debug("Dropping out-of-order update in session %d", session_id)
            return False
        session.last_timestamp = timestamp
        self._live = self._apply_deltas(session.baseline, scale_factor, dx, dy)
        self.liveChanged.emit(self._live)
        return True

    @QtCore.pyqtSlot(int)
    def end_gesture(self, session_id: int) -> bool:
        session = self._session
        if session is None or session.session_id != session_id:
            return False
        self._session = None
        self._last_session_id = session_id
        self._commit(self._live)
        logger.debug("Gesture session %d committed %s", session_id, self._committed)
        self._run_deferred()
        return True

    def _apply_deltas(
        self, baseline: TransformState, scale_factor: float, dx: float, dy: float
    ) -> TransformState:
        if not math.isfinite(scale_factor) or scale_factor <= DEGENERATE_SCALE_FACTOR:
            scale = self._min_scale
        else:
            scale = self.clamp_scale(baseline.scale * scale_factor)
        translate_x = baseline.translate_x + (dx if math.isfinite(dx) else 0.0)
        translate_y = baseline.translate_y + (dy if math.isfinite(dy) else 0.0)
        candidate = TransformState(scale, translate_x, translate_y)
        return constrain_state(candidate, self._geometry)

    # ------------------------------------------------------------------
    # Discrete actions
    # ------------------------------------------------------------------
    @QtCore.pyqtSlot()
    def reset(self) -> bool:
        """Return to the unzoomed, centered view.

        While a session is active the reset waits for that session to end.
        """
        if self._session is not None:
            self._deferred.append(self.reset)
            return False
        self._commit(self._home_state(), force=True)
        return True

    @QtCore.pyqtSlot()
    def double_tap(self) -> bool:
        """Toggle between the home view and the double-tap zoom level."""
        if self._session is not None:
            self._deferred.append(self.double_tap)
            return False
        if self._committed.scale > self._min_scale:
            return self.reset()
        target = replace(self._committed, scale=self.clamp_scale(self._double_tap_scale))
        self._commit(constrain_state(target, self._geometry), force=True)
        return True

    @QtCore.pyqtSlot(object)
    def set_geometry(self, geometry: ViewportGeometry) -> None:
        """Adopt new layout sizes and re-clamp the current state in place."""
        self._geometry = geometry
        self._commit(constrain_state(self._committed, geometry))
        if self._session is not None:
            # republish live last so views keep tracking the in-flight gesture
            self._session.baseline = constrain_state(self._session.baseline, geometry)
            self._live = constrain_state(self._live, geometry)
            self.liveChanged.emit(self._live)

    @QtCore.pyqtSlot()
    def shutdown(self) -> None:
        """Commit any open session and drop queued actions."""
        self._deferred.clear()
        active_id = self.active_session_id()
        if active_id is not None:
            self.end_gesture(active_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _home_state(self) -> TransformState:
        return TransformState(scale=self._min_scale)

    def _commit(self, state: TransformState, *, force: bool = False) -> None:
        changed = state != self._committed
        self._committed = state
        if self._session is None:
            self._live = state
        if changed or force:
            self.committed.emit(state)

    def _run_deferred(self) -> None:
        pending, self._deferred = self._deferred, []
        for action in pending:
            action()


class InteractionScheduler:
    """Runs a :class:`GestureController` on its own ``QThread``."""

    def __init__(self, controller: GestureController) -> None:
        self._controller = controller
        self._thread = QtCore.QThread()
        self._thread.setObjectName("map-interaction")
        controller.moveToThread(self._thread)
        self._stopped = False

    @property
    def controller(self) -> GestureController:
        return self._controller

    @property
    def thread(self) -> QtCore.QThread:
        return self._thread

    def start(self) -> None:
        self._thread.start()

    def stop(self, timeout_ms: int = 2000) -> None:
        if self._stopped:
            return
        self._stopped = True
        if not self._thread.isRunning():
            return
        QtCore.QMetaObject.invokeMethod(
            self._controller, "shutdown", QtCore.Qt.BlockingQueuedConnection
        )
        self._thread.quit()
        if not self._thread.wait(timeout_ms):
            logger.warning("Interaction thread did not stop cleanly")
