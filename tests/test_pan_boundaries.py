import pytest

from location_map.geometry.boundaries import (
    calculate_pan_boundaries,
    constrain_state,
    constrain_translation,
)
from location_map.model.view_state import PanBoundary, TransformState, ViewportGeometry


@pytest.mark.parametrize("scale", [1.0, 0.5, 0.0, -2.0])
def test_no_panning_at_or_below_natural_scale(scale):
    assert calculate_pan_boundaries(100, 200, scale) == PanBoundary(0, 0)


def test_boundaries_include_letterbox_slack():
    assert calculate_pan_boundaries(100, 200, 2) == PanBoundary(-100, 100)
    assert calculate_pan_boundaries(100, 200, 3) == PanBoundary(-150, 150)


def test_boundaries_without_slack_when_image_overflows():
    assert calculate_pan_boundaries(300, 200, 2) == PanBoundary(-150, 150)


@pytest.mark.parametrize(
    "image, screen, scale",
    [(100, 200, 1.5), (640, 480, 2.25), (0, 100, 2), (50, 10, 7)],
)
def test_boundaries_are_symmetric(image, screen, scale):
    boundary = calculate_pan_boundaries(image, screen, scale)
    assert boundary.min == -boundary.max


@pytest.mark.parametrize("value", [-500.0, -100.0, -3.5, 0.0, 42.0, 100.0, 1e9])
def test_constrain_is_idempotent_and_in_range(value):
    boundary = PanBoundary(-100, 100)
    once = constrain_translation(value, boundary)
    assert boundary.min <= once <= boundary.max
    assert constrain_translation(once, boundary) == once


def test_constrain_state_pulls_translate_back_after_zoom_out():
    geometry = ViewportGeometry(100, 100, 200, 200)
    state = TransformState(scale=1.5, translate_x=100.0, translate_y=-100.0)

    constrained = constrain_state(state, geometry)

    assert constrained == TransformState(1.5, 75.0, -75.0)


def test_constrain_state_returns_same_instance_when_inside():
    geometry = ViewportGeometry(100, 100, 200, 200)
    state = TransformState(2.0, 10.0, -10.0)
    assert constrain_state(state, geometry) is state
