"""Great-circle distance on a spherical Earth."""

from __future__ import annotations

from typing import Protocol

import numpy as np

EARTH_RADIUS_M = 6_371_000.0


class _HasLonLat(Protocol):
    longitude: float
    latitude: float


def haversine_distance(src: _HasLonLat, dest: _HasLonLat) -> float:
    """Return the surface distance in metres between two lon/lat points."""

    dlon = np.deg2rad(dest.longitude - src.longitude)
    dlat = np.deg2rad(dest.latitude - src.latitude)
    a = (
        np.sin(dlat / 2.0) ** 2
        + np.cos(np.deg2rad(src.latitude))
        * np.cos(np.deg2rad(dest.latitude))
        * np.sin(dlon / 2.0) ** 2
    )
    # Rounding can push a a hair past 1 for antipodal points.
    a = min(max(float(a), 0.0), 1.0)
    angle = 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))
    return float(angle * EARTH_RADIUS_M)
