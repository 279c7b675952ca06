"""Spherical Mercator (EPSG:3857) projection."""

from __future__ import annotations

import numpy as np

from geoar.errors import DomainError
from geoar.models import LocalPoint

EARTH_CIRCUMFERENCE = 40_075_016.68
HALF_EARTH_CIRCUMFERENCE = 20_037_508.34


class SphMercProjection:
    """Map longitude/latitude onto a planar metric grid and back."""

    def project(self, lon: float, lat: float) -> LocalPoint:
        """Project geographic degrees to planar coordinates.

        Raises:
            DomainError: if ``lat`` is not strictly between -90 and 90.
        """

        return LocalPoint(self.lon_to_sphmerc(lon), self.lat_to_sphmerc(lat))

    def unproject(self, projected: LocalPoint) -> tuple[float, float]:
        """Return ``(lon, lat)`` in degrees for a projected point."""

        return self.sphmerc_to_lon(projected.x), self.sphmerc_to_lat(projected.y)

    def lon_to_sphmerc(self, lon: float) -> float:
        return float(lon) / 180.0 * HALF_EARTH_CIRCUMFERENCE

    def lat_to_sphmerc(self, lat: float) -> float:
        lat = float(lat)
        if not np.isfinite(lat) or not -90.0 < lat < 90.0:
            raise DomainError(f"latitude {lat} is outside the open interval (-90, 90)")
        y = np.log(np.tan((90.0 + lat) * np.pi / 360.0)) / (np.pi / 180.0)
        return float(y * HALF_EARTH_CIRCUMFERENCE / 180.0)

    def sphmerc_to_lon(self, x: float) -> float:
        return float(x) / HALF_EARTH_CIRCUMFERENCE * 180.0

    def sphmerc_to_lat(self, y: float) -> float:
        lat = float(y) / HALF_EARTH_CIRCUMFERENCE * 180.0
        return float(np.rad2deg(2.0 * np.arctan(np.exp(np.deg2rad(lat))) - np.pi / 2.0))

    def get_id(self) -> str:
        return "epsg:3857"
