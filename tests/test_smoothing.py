import math

import numpy as np
import pytest

from geoar.orientation.smoothing import TWO_PI, order_angles, smooth_angle


def _circular_gap(a: float, b: float, angle_range: float = TWO_PI) -> float:
    diff = (a - b) % angle_range
    return min(diff, angle_range - diff)


@pytest.mark.parametrize("angle", [0.0, 0.3, math.pi, 5.9])
@pytest.mark.parametrize("k", [0.0, 0.25, 0.5, 0.9])
def test_equal_angles_are_a_fixed_point(angle: float, k: float) -> None:
    assert smooth_angle(angle, angle, k) == pytest.approx(angle)


def test_factor_one_returns_current_exactly() -> None:
    assert smooth_angle(1.234, 5.0, 1.0) == 1.234
    assert smooth_angle(0.1, 3.0, 1.0, math.pi) == 0.1


def test_factor_zero_holds_previous() -> None:
    assert smooth_angle(math.radians(30.0), math.radians(10.0), 0.0) == pytest.approx(math.radians(10.0))


def test_midpoint_blend() -> None:
    result = smooth_angle(math.radians(30.0), math.radians(10.0), 0.5)
    assert np.isclose(math.degrees(result), 20.0)


def test_blend_takes_shortest_arc_across_wrap() -> None:
    result = smooth_angle(math.radians(359.0), math.radians(1.0), 0.5)
    assert _circular_gap(result, 0.0) < 1e-9


def test_blend_across_wrap_weights_current() -> None:
    result = smooth_angle(math.radians(350.0), math.radians(10.0), 0.75)
    assert np.isclose(math.degrees(result), 355.0)


def test_lower_factor_sticks_to_previous() -> None:
    current, previous = math.radians(30.0), math.radians(10.0)
    sticky = smooth_angle(current, previous, 0.2)
    loose = smooth_angle(current, previous, 0.8)
    assert abs(sticky - previous) < abs(loose - previous)


def test_half_circle_range_wraps() -> None:
    result = smooth_angle(0.01, math.pi - 0.01, 0.5, math.pi)
    assert _circular_gap(result, 0.0, math.pi) < 1e-9
    assert 0.0 <= result < math.pi


def test_result_stays_in_range() -> None:
    result = smooth_angle(-0.5, 7.0, 0.3)
    assert 0.0 <= result < TWO_PI


def test_order_angles_shorter_arc() -> None:
    assert order_angles(0.1, 0.5) == (0.1, 0.5)
    assert order_angles(0.5, 0.1) == (0.1, 0.5)
    assert order_angles(6.0, 0.2) == (6.0, 0.2)


def test_order_angles_tie_keeps_first_on_left() -> None:
    assert order_angles(0.0, math.pi) == (0.0, math.pi)
    assert order_angles(math.pi, 0.0) == (math.pi, 0.0)


def test_invalid_blend_factor() -> None:
    with pytest.raises(ValueError):
        smooth_angle(0.0, 0.0, 1.5)


def test_blend_at_half_turn_treats_current_as_left() -> None:
    assert np.isclose(smooth_angle(0.0, math.pi, 0.25), 0.75 * math.pi)
    assert np.isclose(smooth_angle(math.pi, 0.0, 0.25), 1.75 * math.pi)
