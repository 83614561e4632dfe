"""Value types shared by the map transform math and the gesture controller.

Everything here is immutable. The gesture controller owns the *current*
``TransformState`` instance and replaces it wholesale; readers only ever see
complete snapshots.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ViewportGeometry:
    """Pixel sizes of the displayed map image and of the viewport."""

    image_width: float = 0.0
    image_height: float = 0.0
    screen_width: float = 0.0
    screen_height: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.image_width <= 0 or self.image_height <= 0


@dataclass(frozen=True)
class TransformState:
    """Zoom factor and pan offset (screen pixels) of the map."""

    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0


@dataclass(frozen=True)
class PanBoundary:
    min: float = 0.0
    max: float = 0.0


@dataclass(frozen=True)
class ScreenPoint:
    x: float
    y: float
