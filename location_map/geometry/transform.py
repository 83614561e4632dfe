"""Image-space to screen-space mapping for the map viewport.

Zoom is anchored at the image's own center, and a separate offset centers the
(possibly smaller) image inside the viewport. Keeping the two apart means the
zoom math never needs the screen size and the centering math never needs the
zoom.
"""
from __future__ import annotations

from location_map.geometry.coordinates import (
    normalized_to_pixels,
    pixels_to_normalized,
)
from location_map.model.location import NormalizedPoint
from location_map.model.view_state import (
    ScreenPoint,
    TransformState,
    ViewportGeometry,
)

DEFAULT_HORIZONTAL_PADDING = 32.0
DEFAULT_VERTICAL_PADDING = 100.0


def apply_transform(
    pixel_coord: float,
    image_size: float,
    screen_size: float,
    scale: float,
    translate: float,
) -> float:
    """Map one axis of an image pixel coordinate onto the screen."""
    image_offset = (screen_size - image_size) / 2
    image_center_offset = image_size / 2
    scaled_coord = (pixel_coord - image_center_offset) * scale + image_center_offset
    return scaled_coord + translate + image_offset


def transform_map_coordinates_to_screen(
    normalized_x: float,
    normalized_y: float,
    image_width: float,
    image_height: float,
    screen_width: float,
    screen_height: float,
    scale: float,
    translate_x: float,
    translate_y: float,
) -> ScreenPoint:
    """Map a normalized map position to screen pixels.

    Scale is shared by both axes; image size, screen size and translation are
    per axis so non-square images and viewports work.
    """
    pixel_x = normalized_to_pixels(normalized_x, image_width)
    pixel_y = normalized_to_pixels(normalized_y, image_height)
    return ScreenPoint(
        apply_transform(pixel_x, image_width, screen_width, scale, translate_x),
        apply_transform(pixel_y, image_height, screen_height, scale, translate_y),
    )


def map_point_to_screen(
    point: NormalizedPoint, geometry: ViewportGeometry, state: TransformState
) -> ScreenPoint:
    return transform_map_coordinates_to_screen(
        point.x,
        point.y,
        geometry.image_width,
        geometry.image_height,
        geometry.screen_width,
        geometry.screen_height,
        state.scale,
        state.translate_x,
        state.translate_y,
    )


def _invert_axis(
    screen_coord: float,
    image_size: float,
    screen_size: float,
    scale: float,
    translate: float,
) -> float:
    image_offset = (screen_size - image_size) / 2
    image_center_offset = image_size / 2
    scaled_coord = screen_coord - translate - image_offset
    return (scaled_coord - image_center_offset) / scale + image_center_offset


def screen_to_map_coordinates(
    screen_x: float,
    screen_y: float,
    geometry: ViewportGeometry,
    state: TransformState,
) -> NormalizedPoint | None:
    """Inverse of :func:`map_point_to_screen`.

    Returns ``None`` while the geometry is degenerate or the scale cannot be
    inverted.
    """
    if state.scale <= 0:
        return None
    pixel_x = _invert_axis(
        screen_x,
        geometry.image_width,
        geometry.screen_width,
        state.scale,
        state.translate_x,
    )
    pixel_y = _invert_axis(
        screen_y,
        geometry.image_height,
        geometry.screen_height,
        state.scale,
        state.translate_y,
    )
    normalized_x = pixels_to_normalized(pixel_x, geometry.image_width)
    normalized_y = pixels_to_normalized(pixel_y, geometry.image_height)
    if normalized_x is None or normalized_y is None:
        return None
    return NormalizedPoint(normalized_x, normalized_y)


def is_inside_image(point: NormalizedPoint) -> bool:
    return 0.0 <= point.x <= 1.0 and 0.0 <= point.y <= 1.0


def fit_image_size(
    natural_width: float,
    natural_height: float,
    screen_width: float,
    screen_height: float,
    *,
    horizontal_padding: float = DEFAULT_HORIZONTAL_PADDING,
    vertical_padding: float = DEFAULT_VERTICAL_PADDING,
) -> tuple[float, float]:
    """Shrink the natural image size to fit the viewport, never enlarging it."""
    if natural_width <= 0 or natural_height <= 0:
        return 0.0, 0.0
    available_w = max(screen_width - horizontal_padding, 0.0)
    available_h = max(screen_height - vertical_padding, 0.0)
    factor = min(available_w / natural_width, available_h / natural_height, 1.0)
    return natural_width * factor, natural_height * factor


def viewport_geometry(
    natural_width: float,
    natural_height: float,
    screen_width: float,
    screen_height: float,
    **padding: float,
) -> ViewportGeometry:
    image_width, image_height = fit_image_size(
        natural_width, natural_height, screen_width, screen_height, **padding
    )
    return ViewportGeometry(
        image_width=image_width,
        image_height=image_height,
        screen_width=float(screen_width),
        screen_height=float(screen_height),
    )
