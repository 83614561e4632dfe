"""JSON-file persistence for location records.

The document layout mirrors the application's location dataset::

    {"locations": [...], "version": "1.0", "lastUpdated": "<iso timestamp>"}

Reads never raise: a missing or damaged file yields an empty list so the map
can still be shown. Other parts of the application keep more fields on each
record than this package models, so updates rewrite only the keys they touch.
"""
from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

from location_map.model.location import Location, utc_timestamp

logger = logging.getLogger(__name__)

DATASET_VERSION = "1.0"

_RECORD_KEYS = {
    "name": "name",
    "description": "description",
    "map_coordinates": "mapCoordinates",
}


class LocationStoreError(RuntimeError):
    """Raised when location records cannot be written."""


class LocationStore:
    """Loads and saves the location dataset stored at ``path``."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_payload(self) -> dict[str, Any] | None:
        if not self._path.exists():
            return None
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to read locations from %s: %s", self._path, exc)
            return None
        if not isinstance(payload, dict):
            logger.warning("Ignoring locations file with unexpected shape: %s", self._path)
            return None
        return payload

    def load_locations(self) -> list[Location]:
        payload = self._read_payload()
        if payload is None:
            return []
        records = payload.get("locations")
        if not isinstance(records, list):
            return []
        locations: list[Location] = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                logger.warning("Skipping location entry %d: not an object", index)
                continue
            try:
                locations.append(Location.from_dict(record))
            except ValueError as exc:
                logger.warning("Skipping location entry %d: %s", index, exc)
        logger.debug("Loaded %d locations from %s", len(locations), self._path)
        return locations

    def save_locations(self, locations: list[Location]) -> None:
        """Replace the stored records, keeping the document's other keys."""
        payload = self._read_payload() or {}
        payload["locations"] = [location.to_dict() for location in locations]
        self._write_payload(payload)

    def _write_payload(self, payload: dict[str, Any]) -> None:
        dataset = dict(payload)
        dataset.setdefault("version", DATASET_VERSION)
        dataset["lastUpdated"] = utc_timestamp()
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(dataset, handle, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self._path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
            raise LocationStoreError(
                f"Could not save locations to {self._path}: {exc}"
            ) from exc

    def get_location(self, location_id: str) -> Location | None:
        for location in self.load_locations():
            if location.id == location_id:
                return location
        return None

    def update_location(self, location_id: str, **updates: Any) -> Location | None:
        """Apply ``updates`` to one record and persist the dataset.

        Only the touched keys and ``updatedAt`` change in the stored record.
        Keys this package does not model, and entries it cannot parse, are
        written back as they were read. Returns the updated record, or
        ``None`` when no record has the id.
        """
        unknown = set(updates) - set(_RECORD_KEYS)
        if unknown:
            raise TypeError(f"Cannot update location fields: {', '.join(sorted(unknown))}")
        payload = self._read_payload()
        if payload is None:
            return None
        records = payload.get("locations")
        if not isinstance(records, list):
            return None
        for index, record in enumerate(records):
            if not isinstance(record, dict) or record.get("id") != location_id:
                continue
            try:
                current = Location.from_dict(record)
            except ValueError:
                continue
            updated = current.with_updates(**updates)
            fields = updated.to_dict()
            merged = dict(record)
            for attribute in updates:
                key = _RECORD_KEYS[attribute]
                if key in fields:
                    merged[key] = fields[key]
                else:
                    merged.pop(key, None)
            merged["updatedAt"] = updated.updated_at
            records[index] = merged
            self._write_payload(payload)
            logger.info("Updated location %s (%s)", updated.id, ", ".join(sorted(updates)))
            return updated
        return None
