"""Dialogs shown from the map: location details and the pin placement picker."""
from __future__ import annotations

from PyQt5 import QtCore, QtWidgets

from location_map.model.location import Location, NormalizedPoint


class LocationDetailDialog(QtWidgets.QDialog):
    def __init__(self, location: Location, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle(location.name or "Location")
        self.setMinimumWidth(320)

        layout = QtWidgets.QVBoxLayout(self)
        title = QtWidgets.QLabel(location.name or "(unnamed)")
        font = title.font()
        font.setPointSizeF(font.pointSizeF() * 1.4)
        font.setBold(True)
        title.setFont(font)
        layout.addWidget(title)

        description = QtWidgets.QLabel(location.description or "No description.")
        description.setWordWrap(True)
        layout.addWidget(description)

        if location.map_coordinates is not None:
            coords = QtWidgets.QLabel(
                f"Map position: {location.map_coordinates.x:.3f}, "
                f"{location.map_coordinates.y:.3f}"
            )
            coords.setEnabled(False)
            layout.addWidget(coords)

        buttons = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Close)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)


class LocationPickerDialog(QtWidgets.QDialog):
    """Lets the user pick which location a new pin belongs to."""

    def __init__(
        self,
        locations: list[Location],
        point: NormalizedPoint,
        parent: QtWidgets.QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Select Location for Pin")
        self.setMinimumWidth(360)
        self._point = point

        layout = QtWidgets.QVBoxLayout(self)
        subtitle = QtWidgets.QLabel("Choose a location to place or move on the map")
        layout.addWidget(subtitle)

        self._list = QtWidgets.QListWidget()
        for location in locations:
            label = location.name or location.id
            if location.is_placed:
                label = f"{label}  (placed)"
            item = QtWidgets.QListWidgetItem(label)
            item.setData(QtCore.Qt.UserRole, location.id)
            if location.description:
                item.setToolTip(location.description)
            self._list.addItem(item)
        self._list.itemDoubleClicked.connect(lambda _item: self.accept())
        layout.addWidget(self._list)

        if not locations:
            empty = QtWidgets.QLabel("No locations available. Create a location first.")
            empty.setWordWrap(True)
            layout.addWidget(empty)

        self._buttons = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel
        )
        self._buttons.accepted.connect(self.accept)
        self._buttons.rejected.connect(self.reject)
        ok_button = self._buttons.button(QtWidgets.QDialogButtonBox.Ok)
        ok_button.setEnabled(False)
        self._list.currentItemChanged.connect(
            lambda current, _previous: ok_button.setEnabled(current is not None)
        )
        layout.addWidget(self._buttons)

    @property
    def point(self) -> NormalizedPoint:
        return self._point

    def selected_location_id(self) -> str | None:
        item = self._list.currentItem()
        if item is None:
            return None
        return item.data(QtCore.Qt.UserRole)
