"""Core data models and interfaces for geoar."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Protocol

import numpy as np


@dataclass(frozen=True)
class GeoPoint:
    """Geographic point in degrees."""

    longitude: float
    latitude: float


@dataclass(frozen=True)
class LocalPoint:
    """Planar projected point (metre-equivalent units)."""

    x: float
    y: float


@dataclass(frozen=True)
class GpsCoords:
    """Coordinates block of a platform location fix."""

    longitude: float
    latitude: float
    altitude: float | None = None
    accuracy: float | None = None  # Horizontal 1-sigma radius in metres.


@dataclass(frozen=True)
class GpsFix:
    """Single location fix as delivered by the platform."""

    coords: GpsCoords
    timestamp: float | None = None

    @classmethod
    def from_lon_lat(
        cls,
        lon: float,
        lat: float,
        *,
        altitude: float | None = None,
        accuracy: float | None = None,
        timestamp: float | None = None,
    ) -> "GpsFix":
        return cls(
            coords=GpsCoords(
                longitude=float(lon),
                latitude=float(lat),
                altitude=None if altitude is None else float(altitude),
                accuracy=None if accuracy is None else float(accuracy),
            ),
            timestamp=timestamp,
        )


class GeolocationErrorCode(IntEnum):
    """Platform geolocation error codes (W3C numbering)."""

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


@dataclass(frozen=True)
class FixDecision:
    """Outcome of the fix acceptance filter."""

    accepted: bool
    distance_m: float
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class RawOrientationSample:
    """Device orientation sample: intrinsic Z-X'-Y'' Tait-Bryan angles in degrees."""

    alpha: float | None
    beta: float | None
    gamma: float | None
    absolute: bool = False

    @property
    def is_empty(self) -> bool:
        return self.alpha is None and self.beta is None and self.gamma is None


@dataclass(frozen=True)
class SmoothedOrientation:
    """Previous tick's smoothed angles in radians (shifted smoothing domains)."""

    alpha: float
    beta: float
    gamma: float


@dataclass(eq=False)
class Object3D:
    """Minimal scene object: a mutable position and rotation.

    ``position`` is (x, y, z) with y up and north along -z.
    ``quaternion`` is (x, y, z, w).
    """

    name: str = ""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=float))
    quaternion: np.ndarray = field(
        default_factory=lambda: np.array([0.0, 0.0, 0.0, 1.0], dtype=float)
    )


class Scene(Protocol):
    """Anything objects can be added to."""

    def add(self, obj: Object3D) -> None:
        """Attach an object to the scene."""


@dataclass
class SimpleScene:
    """List-backed scene used for headless runs."""

    children: list[Object3D] = field(default_factory=list)

    def add(self, obj: Object3D) -> None:
        if obj not in self.children:
            self.children.append(obj)


@dataclass(frozen=True)
class PoseLog:
    """Camera pose snapshot for a single render tick."""

    tick: int
    pos_x: float
    pos_y: float
    pos_z: float
    quat_x: float
    quat_y: float
    quat_z: float
    quat_w: float
    fix_accepted: bool | None = None
    fix_distance_m: float | None = None
    fix_reasons: tuple[str, ...] = ()
    rotation_changed: bool = False
