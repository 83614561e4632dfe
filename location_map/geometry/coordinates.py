"""Normalized <-> image pixel conversion.

Marker positions are stored as fractions of the image size so they survive
swapping the map asset for one with a different resolution.
"""
from __future__ import annotations


def normalized_to_pixels(normalized: float, image_size: float) -> float:
    """Return the pixel offset of ``normalized`` along an image axis.

    Values outside ``[0, 1]`` are converted with the same formula; deciding
    whether such markers are shown is up to the caller.
    """
    return normalized * image_size


def pixels_to_normalized(pixel: float, image_size: float) -> float | None:
    if image_size == 0:
        return None
    return pixel / image_size
