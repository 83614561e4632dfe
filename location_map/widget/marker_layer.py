"""Marker placement, hit testing and painting for the location map."""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable

from PyQt5 import QtCore, QtGui

from location_map.geometry.transform import map_point_to_screen
from location_map.model.location import Location
from location_map.model.view_state import ScreenPoint, TransformState, ViewportGeometry

PIN_SIZE = 24.0
LABEL_MAX_WIDTH = 120


@dataclass(frozen=True)
class Marker:
    location_id: str
    name: str
    screen: ScreenPoint


class MarkerLayer:
    """Turns placed locations into screen markers.

    The tap radius is in screen pixels and does not change with zoom, so
    markers stay easy to hit when the map is zoomed out.
    """

    def __init__(self, hit_radius: float = 20.0) -> None:
        self._hit_radius = hit_radius

    @property
    def hit_radius(self) -> float:
        return self._hit_radius

    def layout(
        self,
        locations: Iterable[Location],
        geometry: ViewportGeometry,
        state: TransformState,
        *,
        cull: bool = False,
    ) -> list[Marker]:
        markers: list[Marker] = []
        for location in locations:
            if location.map_coordinates is None:
                continue
            screen = map_point_to_screen(location.map_coordinates, geometry, state)
            if cull and not self._is_visible(screen, geometry):
                continue
            markers.append(Marker(location.id, location.name, screen))
        return markers

    def _is_visible(self, point: ScreenPoint, geometry: ViewportGeometry) -> bool:
        margin = self._hit_radius
        return (
            -margin <= point.x <= geometry.screen_width + margin
            and -margin <= point.y <= geometry.screen_height + margin
        )

    def hit_test(self, markers: Iterable[Marker], x: float, y: float) -> str | None:
        """Return the id of the nearest marker within the hit radius."""
        best_id = None
        best_distance = None
        for marker in markers:
            distance = math.hypot(marker.screen.x - x, marker.screen.y - y)
            if distance > self._hit_radius:
                continue
            if best_distance is None or distance < best_distance:
                best_distance = distance
                best_id = marker.location_id
        return best_id

    def paint(
        self,
        painter: QtGui.QPainter,
        markers: Iterable[Marker],
        selected_id: str | None = None,
    ) -> None:
        painter.save()
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        metrics = painter.fontMetrics()
        for marker in markers:
            self._paint_pin(painter, marker, marker.location_id == selected_id)
            self._paint_label(painter, metrics, marker)
        painter.restore()

    def _paint_pin(
        self, painter: QtGui.QPainter, marker: Marker, selected: bool
    ) -> None:
        tip = QtCore.QPointF(marker.screen.x, marker.screen.y)
        radius = PIN_SIZE / 3
        head = QtCore.QPointF(tip.x(), tip.y() - PIN_SIZE + radius)
        path = QtGui.QPainterPath()
        path.moveTo(tip)
        path.lineTo(head.x() - radius * 0.8, head.y() + radius * 0.6)
        path.arcTo(
            QtCore.QRectF(head.x() - radius, head.y() - radius, radius * 2, radius * 2),
            217.0,
            -254.0,
        )
        path.closeSubpath()
        fill = QtGui.QColor(255, 196, 0) if selected else QtGui.QColor(220, 48, 48)
        painter.setPen(QtGui.QPen(QtGui.QColor(32, 32, 32), 1.5))
        painter.setBrush(fill)
        painter.drawPath(path)
        painter.setBrush(QtGui.QColor(255, 255, 255))
        painter.drawEllipse(head, radius * 0.35, radius * 0.35)

    def _paint_label(
        self, painter: QtGui.QPainter, metrics: QtGui.QFontMetrics, marker: Marker
    ) -> None:
        if not marker.name:
            return
        text = metrics.elidedText(marker.name, QtCore.Qt.ElideRight, LABEL_MAX_WIDTH)
        width = metrics.horizontalAdvance(text) + 16
        height = metrics.height() + 8
        rect = QtCore.QRectF(
            marker.screen.x - width / 2, marker.screen.y + 2, width, height
        )
        painter.setPen(QtGui.QPen(QtGui.QColor(90, 90, 90), 1.0))
        painter.setBrush(QtGui.QColor(40, 40, 40, 220))
        painter.drawRoundedRect(rect, 4, 4)
        painter.setPen(QtGui.QColor(240, 240, 240))
        painter.drawText(rect, QtCore.Qt.AlignCenter, text)
