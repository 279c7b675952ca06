"""Shortest-arc smoothing of circular angles."""

from __future__ import annotations

import math

TWO_PI = 2.0 * math.pi
HALF_PI = 0.5 * math.pi


def _first_is_left(a: float, b: float, angle_range: float) -> bool:
    # Ties (exactly half the range apart) keep ``a`` on the left.
    return (b - a) % angle_range <= angle_range / 2.0


def order_angles(a: float, b: float, angle_range: float = TWO_PI) -> tuple[float, float]:
    """Return ``(left, right)`` so that right is ahead of left on the shorter arc."""

    if _first_is_left(a, b, angle_range):
        return a, b
    return b, a


def smooth_angle(
    current: float,
    previous: float,
    blend_factor: float,
    angle_range: float = TWO_PI,
) -> float:
    """Blend ``current`` toward ``previous`` along the shorter arc.

    ``blend_factor`` weights the current reading: 1 returns ``current`` as is,
    smaller values stick closer to ``previous``. The result lies in
    ``[0, angle_range)``.
    """

    if not 0.0 <= blend_factor <= 1.0:
        raise ValueError(f"blend_factor must be in [0, 1], got {blend_factor}")
    if blend_factor == 1.0:
        return current

    current = current % angle_range
    previous = previous % angle_range
    if _first_is_left(current, previous, angle_range):
        left, right, weight = current, previous, 1.0 - blend_factor
    else:
        left, right, weight = previous, current, blend_factor

    right -= left
    if right < 0.0:
        right += angle_range

    # Left sits at zero after the shift, so only the right-hand term survives.
    blended = weight * right + left
    return blended % angle_range
