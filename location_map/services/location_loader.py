"""Background loading of location records for the map screen."""
from __future__ import annotations

import logging

from PyQt5 import QtCore

from location_map.services.location_store import LocationStore

logger = logging.getLogger(__name__)


class LocationLoadSignals(QtCore.QObject):
    loaded = QtCore.pyqtSignal(int, list)


class LocationLoadTask(QtCore.QRunnable):
    """Reads the location store on a pool thread.

    ``generation`` lets the receiver discard results that were overtaken by a
    newer load request.
    """

    def __init__(self, generation: int, store: LocationStore) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self.signals = LocationLoadSignals()
        self._generation = generation
        self._store = store

    def run(self) -> None:
        try:
            locations = self._store.load_locations()
        except Exception:
            logger.exception("Unexpected error while loading locations")
            locations = []
        self.signals.loaded.emit(self._generation, locations)


class LocationLoader(QtCore.QObject):
    """Starts load tasks and forwards only the newest result."""

    locationsLoaded = QtCore.pyqtSignal(list)

    def __init__(
        self,
        store: LocationStore,
        pool: QtCore.QThreadPool | None = None,
        parent: QtCore.QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._pool = pool or QtCore.QThreadPool.globalInstance()
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def request(self) -> int:
        self._generation += 1
        task = LocationLoadTask(self._generation, self._store)
        task.signals.loaded.connect(self._on_loaded, QtCore.Qt.QueuedConnection)
        self._pool.start(task)
        return self._generation

    @QtCore.pyqtSlot(int, list)
    def _on_loaded(self, generation: int, locations: list) -> None:
        if generation != self._generation:
            logger.debug("Dropping stale location load %d", generation)
            return
        logger.info("Loaded %d locations", len(locations))
        self.locationsLoaded.emit(locations)
