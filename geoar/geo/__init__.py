"""Geodesy helpers: projection and distances."""

from geoar.geo.distance import EARTH_RADIUS_M, haversine_distance
from geoar.geo.projection import (
    EARTH_CIRCUMFERENCE,
    HALF_EARTH_CIRCUMFERENCE,
    SphMercProjection,
)

__all__ = [
    "EARTH_CIRCUMFERENCE",
    "EARTH_RADIUS_M",
    "HALF_EARTH_CIRCUMFERENCE",
    "SphMercProjection",
    "haversine_distance",
]
