"""Pan limits for the zoomed map image."""
from __future__ import annotations

from dataclasses import replace

from location_map.model.view_state import PanBoundary, TransformState, ViewportGeometry


def calculate_pan_boundaries(
    image_size: float, screen_size: float, scale: float
) -> PanBoundary:
    """Return the legal translate range along one axis.

    An unzoomed (or zoomed-out) image stays centered and cannot be panned.
    Once zoomed, the image may slide half of its growth in either direction,
    plus any letterbox slack the unzoomed image left on that axis.
    """
    if scale <= 1:
        return PanBoundary(0.0, 0.0)
    scaled_image_size = image_size * scale
    excess = scaled_image_size - image_size
    max_translate = excess / 2
    center_offset = max(0.0, (screen_size - image_size) / 2)
    bound = max_translate + center_offset
    return PanBoundary(-bound, bound)


def constrain_translation(value: float, boundary: PanBoundary) -> float:
    return max(boundary.min, min(boundary.max, value))


def state_boundaries(
    geometry: ViewportGeometry, scale: float
) -> tuple[PanBoundary, PanBoundary]:
    return (
        calculate_pan_boundaries(geometry.image_width, geometry.screen_width, scale),
        calculate_pan_boundaries(geometry.image_height, geometry.screen_height, scale),
    )


def constrain_state(state: TransformState, geometry: ViewportGeometry) -> TransformState:
    """Pull both translates back inside the boundary for ``state.scale``."""
    boundary_x, boundary_y = state_boundaries(geometry, state.scale)
    translate_x = constrain_translation(state.translate_x, boundary_x)
    translate_y = constrain_translation(state.translate_y, boundary_y)
    if translate_x == state.translate_x and translate_y == state.translate_y:
        return state
    return replace(state, translate_x=translate_x, translate_y=translate_y)
