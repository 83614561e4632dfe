"""Location records as consumed by the map screen.

Records come from JSON written by other parts of the application, so parsing
is tolerant: a malformed ``mapCoordinates`` value means "not placed" rather
than an error.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
import logging
import math
from typing import Any, Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedPoint:
    """Position as a fraction of image width/height (0..1 nominal)."""

    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Location:
    id: str
    name: str
    description: str = ""
    map_coordinates: NormalizedPoint | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_placed(self) -> bool:
        return self.map_coordinates is not None

    def with_updates(self, **updates: Any) -> "Location":
        """Return a copy with ``updates`` applied and ``updated_at`` stamped."""
        updates.pop("id", None)
        updates.pop("created_at", None)
        updates.pop("updated_at", None)
        return replace(self, **updates, updated_at=utc_timestamp())

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.map_coordinates is not None:
            payload["mapCoordinates"] = self.map_coordinates.to_dict()
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Location":
        location_id = payload.get("id")
        if not isinstance(location_id, str) or not location_id:
            raise ValueError("location record has no id")
        return cls(
            id=location_id,
            name=str(payload.get("name") or ""),
            description=str(payload.get("description") or ""),
            map_coordinates=parse_map_coordinates(payload.get("mapCoordinates")),
            created_at=str(payload.get("createdAt") or ""),
            updated_at=str(payload.get("updatedAt") or ""),
        )


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _coordinate_value(value: object) -> float | None:
    # bool is an int subclass; a stray True must not become 1.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    result = float(value)
    if not math.isfinite(result):
        return None
    return result


def parse_map_coordinates(raw: object) -> NormalizedPoint | None:
    """Return a point only when both ``x`` and ``y`` are usable numbers."""
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        logger.debug("Ignoring non-object mapCoordinates: %r", raw)
        return None
    x = _coordinate_value(raw.get("x"))
    y = _coordinate_value(raw.get("y"))
    if x is None or y is None:
        logger.debug("Ignoring partial mapCoordinates: %r", dict(raw))
        return None
    return NormalizedPoint(x, y)


def placed_locations(locations: list[Location]) -> list[Location]:
    return [location for location in locations if location.map_coordinates is not None]
