"""Main window for the location map.

The window wires the two schedulers together: the :class:`MapView` on the GUI
thread and the :class:`GestureController` on the interaction thread. Every
connection between them is queued.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PyQt5 import QtCore, QtWidgets

from location_map.config import MapSettings, resolve_path
from location_map.controllers.gesture_controller import (
    GestureController,
    InteractionScheduler,
)
from location_map.model.location import Location, NormalizedPoint, placed_locations
from location_map.services.location_loader import LocationLoader
from location_map.services.location_store import LocationStore, LocationStoreError
from location_map.widget.location_dialogs import LocationDetailDialog, LocationPickerDialog
from location_map.widget.map_view import MapView

logger = logging.getLogger(__name__)

_QUEUED = QtCore.Qt.QueuedConnection


class LocationMapWindow(QtWidgets.QMainWindow):
    def __init__(
        self,
        settings: MapSettings,
        main_script_path: Optional[Path] = None,
        parent: QtWidgets.QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Location Map")
        self.resize(960, 720)
        self._settings = settings
        self._has_been_active = False

        locations_path = resolve_path(settings.locations_file, main_script_path)
        self._store = LocationStore(locations_path or Path(settings.locations_file))
        self._loader = LocationLoader(self._store, parent=self)
        self._loader.locationsLoaded.connect(self._on_locations_loaded)

        self._view = MapView(settings, self)
        self.setCentralWidget(self._view)

        self._controller = GestureController(
            min_scale=settings.min_scale,
            max_scale=settings.max_scale,
            double_tap_scale=settings.double_tap_scale,
        )
        self._scheduler = InteractionScheduler(self._controller)
        self._connect_controller()

        image_path = resolve_path(settings.map_image, main_script_path)
        if image_path is None or not self._view.set_map_image(image_path):
            self.statusBar().showMessage("Map image not configured or unreadable.")

        self._scheduler.start()

    @property
    def view(self) -> MapView:
        return self._view

    @property
    def store(self) -> LocationStore:
        return self._store

    def _connect_controller(self) -> None:
        view = self._view
        controller = self._controller
        view.gestureBegan.connect(controller.begin_gesture, _QUEUED)
        view.gestureUpdated.connect(controller.update_gesture, _QUEUED)
        view.gestureEnded.connect(controller.end_gesture, _QUEUED)
        view.resetRequested.connect(controller.reset, _QUEUED)
        view.doubleTapRequested.connect(controller.double_tap, _QUEUED)
        view.geometryChanged.connect(controller.set_geometry, _QUEUED)
        controller.liveChanged.connect(view.on_live_changed, _QUEUED)
        controller.committed.connect(view.on_committed, _QUEUED)

        view.markerSelected.connect(self._on_marker_selected)
        view.placementRequested.connect(self._on_placement_requested)

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------
    def reload_locations(self) -> None:
        self._loader.request()

    def _on_locations_loaded(self, locations: list) -> None:
        self._view.set_locations(locations)
        placed = len(placed_locations(locations))
        self.statusBar().showMessage(f"{placed} of {len(locations)} locations placed")

    def _find_location(self, location_id: str) -> Location | None:
        for location in self._view.locations():
            if location.id == location_id:
                return location
        return None

    def _on_marker_selected(self, location_id: str) -> None:
        location = self._find_location(location_id)
        if location is None:
            return
        logger.info("Showing location %s", location_id)
        LocationDetailDialog(location, self).exec_()

    def _on_placement_requested(self, point: NormalizedPoint) -> None:
        dialog = LocationPickerDialog(self._view.locations(), point, self)
        if dialog.exec_() != QtWidgets.QDialog.Accepted:
            return
        location_id = dialog.selected_location_id()
        if location_id is None:
            return
        self.place_location(location_id, dialog.point)

    def place_location(self, location_id: str, point: NormalizedPoint) -> bool:
        try:
            updated = self._store.update_location(location_id, map_coordinates=point)
        except LocationStoreError:
            logger.exception("Failed to save pin location for %s", location_id)
            QtWidgets.QMessageBox.critical(
                self, "Error", "Failed to save pin location. Please try again."
            )
            return False
        if updated is None:
            logger.warning("Location %s no longer exists", location_id)
            return False
        self.statusBar().showMessage(f'Pin placed for "{updated.name}" on the map.', 5000)
        self.reload_locations()
        return True

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------
    def changeEvent(self, event: QtCore.QEvent) -> None:  # noqa: D401 - Qt signature
        if event.type() == QtCore.QEvent.ActivationChange and self.isActiveWindow():
            self._on_focus()
        super().changeEvent(event)

    def showEvent(self, event) -> None:  # noqa: D401 - Qt signature
        super().showEvent(event)
        if not self._has_been_active:
            self._has_been_active = True
            self.reload_locations()

    def _on_focus(self) -> None:
        if not self._has_been_active:
            return
        if QtWidgets.QApplication.activeModalWidget() is not None:
            return
        self.reload_locations()
        if self._settings.reset_on_focus:
            QtCore.QMetaObject.invokeMethod(self._controller, "reset", _QUEUED)

    def shutdown(self) -> None:
        self._scheduler.stop()

    def closeEvent(self, event) -> None:  # noqa: D401 - Qt signature
        self.shutdown()
        super().closeEvent(event)
