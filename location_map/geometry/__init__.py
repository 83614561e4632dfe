"""Pure coordinate math for the map viewport."""
from __future__ import annotations

from location_map.geometry.boundaries import (
    calculate_pan_boundaries,
    constrain_state,
    constrain_translation,
)
from location_map.geometry.coordinates import normalized_to_pixels, pixels_to_normalized
from location_map.geometry.transform import (
    apply_transform,
    fit_image_size,
    map_point_to_screen,
    screen_to_map_coordinates,
    transform_map_coordinates_to_screen,
)

__all__ = [
    "apply_transform",
    "calculate_pan_boundaries",
    "constrain_state",
    "constrain_translation",
    "fit_image_size",
    "map_point_to_screen",
    "normalized_to_pixels",
    "pixels_to_normalized",
    "screen_to_map_coordinates",
    "transform_map_coordinates_to_screen",
]
