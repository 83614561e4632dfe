"""Qt widget that draws the map image with location pins and reads gestures.

This module lives on the GUI thread. It never mutates the transform state:
gestures go out through signals (queued to the interaction thread) and the
resulting state comes back through :meth:`MapView.on_live_changed` and
:meth:`MapView.on_committed`.
"""
from __future__ import annotations

import logging
from pathlib import Path

from PyQt5 import QtCore, QtGui, QtWidgets

from location_map.config import MapSettings
from location_map.geometry.transform import (
    apply_transform,
    is_inside_image,
    screen_to_map_coordinates,
    viewport_geometry,
)
from location_map.model.location import Location
from location_map.model.view_state import TransformState, ViewportGeometry
from location_map.widget.gesture_input import GestureCallbacks, GestureInput
from location_map.widget.marker_layer import Marker, MarkerLayer

logger = logging.getLogger(__name__)


class MapView(QtWidgets.QWidget):
    gestureBegan = QtCore.pyqtSignal(int)
    gestureUpdated = QtCore.pyqtSignal(int, float, float, float, float)
    gestureEnded = QtCore.pyqtSignal(int)
    resetRequested = QtCore.pyqtSignal()
    doubleTapRequested = QtCore.pyqtSignal()
    geometryChanged = QtCore.pyqtSignal(object)
    markerSelected = QtCore.pyqtSignal(str)
    placementRequested = QtCore.pyqtSignal(object)

    def __init__(
        self, settings: MapSettings, parent: QtWidgets.QWidget | None = None
    ) -> None:
        super().__init__(parent)
        self.setMinimumSize(320, 240)
        self.setMouseTracking(False)
        self.setFocusPolicy(QtCore.Qt.StrongFocus)
        self.setAttribute(QtCore.Qt.WA_AcceptTouchEvents, True)
        self.grabGesture(QtCore.Qt.PinchGesture)

        palette = self.palette()
        palette.setColor(QtGui.QPalette.Window, QtGui.QColor(24, 24, 24))
        self.setPalette(palette)
        self.setAutoFillBackground(True)

        self._settings = settings
        self._marker_layer = MarkerLayer(settings.hit_radius)
        self._pixmap = QtGui.QPixmap()
        self._natural_size = (0.0, 0.0)
        self._geometry = ViewportGeometry()
        self._committed = TransformState(scale=settings.min_scale)
        self._display = self._committed
        self._locations: list[Location] = []
        self._markers: list[Marker] = []
        self._selected_id: str | None = None
        self._locations_loaded = False

        self._input = GestureInput(
            GestureCallbacks(
                began=self.gestureBegan.emit,
                updated=self.gestureUpdated.emit,
                ended=self.gestureEnded.emit,
            )
        )
        self._tap_timer = QtCore.QTimer(self)
        self._tap_timer.setSingleShot(True)
        self._tap_timer.setInterval(QtWidgets.QApplication.doubleClickInterval())
        self._tap_timer.timeout.connect(self._flush_pending_tap)
        self._pending_tap: QtCore.QPointF | None = None

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------
    def set_map_image(self, path: Path | None) -> bool:
        """Load the background image; returns False when it is unusable."""
        if path is None:
            return False
        reader = QtGui.QImageReader(str(path))
        size = reader.size()
        if not size.isValid():
            logger.warning("Cannot read map image size: %s (%s)", path, reader.errorString())
            return False
        pixmap = QtGui.QPixmap(str(path))
        if pixmap.isNull():
            logger.warning("Cannot load map image: %s", path)
            return False
        self._pixmap = pixmap
        self.set_natural_size(size.width(), size.height())
        return True

    def set_natural_size(self, width: float, height: float) -> None:
        self._natural_size = (float(width), float(height))
        self._update_geometry()

    def set_locations(self, locations: list[Location]) -> None:
        self._locations = list(locations)
        self._locations_loaded = True
        if self._selected_id is not None and not any(
            location.id == self._selected_id for location in self._locations
        ):
            self._selected_id = None
        self._relayout()

    def locations(self) -> list[Location]:
        return list(self._locations)

    def markers(self) -> list[Marker]:
        return list(self._markers)

    def viewport(self) -> ViewportGeometry:
        return self._geometry

    def committed_state(self) -> TransformState:
        return self._committed

    def display_state(self) -> TransformState:
        return self._display

    # ------------------------------------------------------------------
    # State coming back from the interaction thread
    # ------------------------------------------------------------------
    @QtCore.pyqtSlot(object)
    def on_live_changed(self, state: TransformState) -> None:
        self._display = state
        self._relayout()

    @QtCore.pyqtSlot(object)
    def on_committed(self, state: TransformState) -> None:
        self._committed = state
        if not self._input.active:
            self._display = state
        self._relayout()

    def _relayout(self) -> None:
        self._markers = self._marker_layer.layout(
            self._locations,
            self._geometry,
            self._display,
            cull=self._settings.cull_offscreen,
        )
        self.update()

    def _update_geometry(self) -> None:
        geometry = viewport_geometry(
            self._natural_size[0],
            self._natural_size[1],
            self.width(),
            self.height(),
        )
        if geometry == self._geometry:
            return
        self._geometry = geometry
        self.geometryChanged.emit(geometry)
        self._relayout()

    # ------------------------------------------------------------------
    # Taps
    # ------------------------------------------------------------------
    def handle_tap(self, x: float, y: float) -> None:
        """Select the marker under ``(x, y)`` or request a new placement."""
        markers = self._marker_layer.layout(self._locations, self._geometry, self._committed)
        hit = self._marker_layer.hit_test(markers, x, y)
        if hit is not None:
            self._selected_id = hit
            self.update()
            self.markerSelected.emit(hit)
            return
        if self._geometry.is_empty:
            return
        point = screen_to_map_coordinates(x, y, self._geometry, self._committed)
        if point is not None and is_inside_image(point):
            self.placementRequested.emit(point)

    def _flush_pending_tap(self) -> None:
        pos = self._pending_tap
        self._pending_tap = None
        if pos is not None:
            self.handle_tap(pos.x(), pos.y())

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------
    def paintEvent(self, event) -> None:  # noqa: D401 - Qt signature
        painter = QtGui.QPainter(self)
        painter.fillRect(self.rect(), self.palette().color(QtGui.QPalette.Window))
        if self._geometry.is_empty:
            painter.setPen(QtGui.QColor(180, 180, 180))
            painter.drawText(self.rect(), QtCore.Qt.AlignCenter, "Loading map...")
            painter.end()
            return
        painter.setRenderHint(QtGui.QPainter.SmoothPixmapTransform, True)
        target = self._image_rect(self._display)
        if not self._pixmap.isNull():
            painter.drawPixmap(target, self._pixmap, QtCore.QRectF(self._pixmap.rect()))
        else:
            painter.setPen(QtGui.QPen(QtGui.QColor(90, 90, 90), 1.0))
            painter.drawRect(target)
        self._marker_layer.paint(painter, self._markers, self._selected_id)
        if self._locations_loaded and not self._markers:
            painter.setPen(QtGui.QColor(180, 180, 180))
            painter.drawText(
                self.rect().adjusted(8, 8, -8, -8),
                QtCore.Qt.AlignLeft | QtCore.Qt.AlignTop,
                "No locations placed. Click the map to place one.",
            )
        painter.end()

    def _image_rect(self, state: TransformState) -> QtCore.QRectF:
        geometry = self._geometry
        left = apply_transform(
            0.0, geometry.image_width, geometry.screen_width, state.scale, state.translate_x
        )
        top = apply_transform(
            0.0, geometry.image_height, geometry.screen_height, state.scale, state.translate_y
        )
        return QtCore.QRectF(
            left, top, geometry.image_width * state.scale, geometry.image_height * state.scale
        )

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # noqa: D401 - Qt signature
        super().resizeEvent(event)
        self._update_geometry()

    def event(self, event: QtCore.QEvent) -> bool:  # noqa: D401 - Qt signature
        if event.type() == QtCore.QEvent.Gesture:
            return self._handle_gesture_event(event)
        return super().event(event)

    def _handle_gesture_event(self, event: QtWidgets.QGestureEvent) -> bool:
        pinch = event.gesture(QtCore.Qt.PinchGesture)
        if pinch is None:
            return False
        state = pinch.state()
        if state == QtCore.Qt.GestureStarted:
            self._input.pinch_started()
        elif state == QtCore.Qt.GestureUpdated:
            self._input.pinch_changed(pinch.totalScaleFactor())
        elif state in (QtCore.Qt.GestureFinished, QtCore.Qt.GestureCanceled):
            self._input.pinch_changed(pinch.totalScaleFactor())
            self._input.pinch_finished()
        event.accept(pinch)
        return True

    def wheelEvent(self, event: QtGui.QWheelEvent) -> None:  # noqa: D401 - Qt signature
        delta = event.angleDelta().y()
        if delta == 0:
            super().wheelEvent(event)
            return
        step = self._settings.wheel_step
        self._input.wheel(step if delta > 0 else 1 / step)
        event.accept()

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: D401 - Qt signature
        if event.button() != QtCore.Qt.LeftButton:
            super().mousePressEvent(event)
            return
        self._input.press(event.x(), event.y())
        event.accept()

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: D401 - Qt signature
        if self._input.move(event.x(), event.y()):
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: D401 - Qt signature
        if event.button() != QtCore.Qt.LeftButton:
            super().mouseReleaseEvent(event)
            return
        if self._input.release(event.x(), event.y()):
            # wait out the double-click interval before treating it as a tap
            self._pending_tap = QtCore.QPointF(event.localPos())
            self._tap_timer.start()
        event.accept()

    def mouseDoubleClickEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: D401 - Qt signature
        if event.button() != QtCore.Qt.LeftButton:
            super().mouseDoubleClickEvent(event)
            return
        self._tap_timer.stop()
        self._pending_tap = None
        self.doubleTapRequested.emit()
        event.accept()

    def keyPressEvent(self, event: QtGui.QKeyEvent) -> None:  # noqa: D401 - Qt signature
        if event.key() in (QtCore.Qt.Key_Home, QtCore.Qt.Key_0):
            self.resetRequested.emit()
            event.accept()
            return
        super().keyPressEvent(event)

    def leaveEvent(self, event) -> None:  # noqa: D401 - Qt signature
        if self._input.active and not (
            QtWidgets.QApplication.mouseButtons() & QtCore.Qt.LeftButton
        ):
            self._input.cancel_all()
        super().leaveEvent(event)

    def focusOutEvent(self, event: QtGui.QFocusEvent) -> None:  # noqa: D401 - Qt signature
        self._input.cancel_all()
        super().focusOutEvent(event)
