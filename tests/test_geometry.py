import math

import pytest

from blink_gate.models import DegenerateGeometry, Point2D, calculate_ear, distance, midpoint_x
from conftest import make_eye


def test_distance():
    assert distance(Point2D(0, 0), Point2D(3, 4)) == pytest.approx(5.0)
    assert midpoint_x(Point2D(10, 0), Point2D(20, 5)) == 15.0


def test_distance_nan_propagates():
    assert math.isnan(distance(Point2D(float("nan"), 0), Point2D(1, 1)))


def test_ear_formula():
    assert calculate_ear(make_eye(0.3, 0.0)) == pytest.approx(0.3)
    assert calculate_ear(make_eye(0.1, 50.0)) == pytest.approx(0.1)


def test_ear_scale_invariant():
    eye = make_eye(0.27, 12.0, width=40.0, y=33.0)
    ear = calculate_ear(eye)
    for k in (0.5, 3.7, 120.0):
        scaled = tuple(Point2D(p.x * k, p.y * k) for p in eye)
        assert calculate_ear(scaled) == pytest.approx(ear)


def test_ear_zero_width_is_degenerate():
    eye = tuple(Point2D(5.0, 5.0) for _ in range(6))
    with pytest.raises(DegenerateGeometry):
        calculate_ear(eye)


def test_ear_non_finite_is_degenerate():
    eye = list(make_eye(0.3, 0.0))
    eye[1] = Point2D(float("nan"), 0.0)
    with pytest.raises(DegenerateGeometry):
        calculate_ear(tuple(eye))
