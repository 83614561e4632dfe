import os
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

pytest.importorskip("PyQt5")

from PyQt5 import QtCore, QtGui, QtWidgets

from location_map.config import MapSettings
from location_map.model.location import Location, NormalizedPoint
from location_map.model.view_state import TransformState, ViewportGeometry
from location_map.widget.map_view import MapView


@pytest.fixture(scope="module")
def qapp():
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app


@pytest.fixture
def view(qapp):
    widget = MapView(MapSettings())
    widget.resize(400, 400)
    widget.set_natural_size(200, 200)
    widget.set_locations(
        [
            Location(id="cabin", name="Cabin", map_coordinates=NormalizedPoint(0.5, 0.5)),
            Location(id="lake", name="Lake"),
        ]
    )
    yield widget
    widget.deleteLater()


def _record(signal):
    received = []
    signal.connect(received.append)
    return received


def test_geometry_follows_natural_size_and_widget_size(view):
    assert view.viewport() == ViewportGeometry(200, 200, 400, 400)
    received = _record(view.geometryChanged)

    view.set_natural_size(1472, 600)

    # 368 x 300 available after padding
    assert received == [ViewportGeometry(368, 150, 400, 400)]


def test_unchanged_geometry_is_not_reannounced(view):
    received = _record(view.geometryChanged)
    view.set_natural_size(200, 200)
    assert received == []


def test_markers_only_for_placed_locations(view):
    markers = view.markers()
    assert [marker.location_id for marker in markers] == ["cabin"]
    assert (markers[0].screen.x, markers[0].screen.y) == (200, 200)


def test_tap_on_marker_selects_it(view):
    selected = _record(view.markerSelected)
    placements = _record(view.placementRequested)

    view.handle_tap(210, 195)

    assert selected == ["cabin"]
    assert placements == []


def test_tap_on_empty_map_requests_placement(view):
    placements = _record(view.placementRequested)
    view.handle_tap(120, 120)
    assert placements == [NormalizedPoint(0.1, 0.1)]


def test_tap_uses_committed_zoom(view):
    placements = _record(view.placementRequested)
    view.on_committed(TransformState(2.0, 0.0, 0.0))

    view.handle_tap(120, 120)

    assert placements == [NormalizedPoint(0.3, 0.3)]


def test_tap_outside_image_is_ignored(view):
    placements = _record(view.placementRequested)
    selected = _record(view.markerSelected)
    view.handle_tap(20, 20)
    assert placements == []
    assert selected == []


def test_tap_before_image_loaded_is_ignored(qapp):
    widget = MapView(MapSettings())
    placements = _record(widget.placementRequested)
    widget.handle_tap(10, 10)
    assert placements == []


def test_live_state_moves_markers_but_not_committed(view):
    view.on_live_changed(TransformState(2.0, 30.0, 0.0))

    assert view.display_state() == TransformState(2.0, 30.0, 0.0)
    assert view.committed_state() == TransformState(1.0, 0.0, 0.0)
    assert view.markers()[0].screen.x == 230


def test_home_key_requests_reset(view):
    resets = []
    view.resetRequested.connect(lambda: resets.append(True))
    event = QtGui.QKeyEvent(QtCore.QEvent.KeyPress, QtCore.Qt.Key_Home, QtCore.Qt.NoModifier)

    view.keyPressEvent(event)

    assert resets == [True]


def test_paint_without_image_does_not_fail(view):
    image = QtGui.QImage(400, 400, QtGui.QImage.Format_ARGB32)
    view.render(image)
