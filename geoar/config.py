"""Configuration objects for the positioning and orientation engines."""

from __future__ import annotations

from dataclasses import dataclass

from geoar.models import GeoPoint


@dataclass(frozen=True)
class GpsConfig:
    """Fix filtering and origin defaults for :class:`GeoAnchor`."""

    gps_min_distance: float = 0.0
    gps_min_accuracy: float = 100.0
    maximum_age: int = 0  # Milliseconds, passed through to the platform.
    initial_position: GeoPoint | None = None
    initial_position_as_origin: bool = False

    def __post_init__(self) -> None:
        if self.gps_min_distance < 0.0:
            raise ValueError("gps_min_distance must be >= 0")
        if self.gps_min_accuracy < 0.0:
            raise ValueError("gps_min_accuracy must be >= 0")
        if self.maximum_age < 0:
            raise ValueError("maximum_age must be >= 0")


@dataclass(frozen=True)
class OrientationConfig:
    """Smoothing and heading defaults for :class:`OrientationFuser`."""

    smoothing_factor: float = 1.0
    alpha_offset: float = 0.0  # Radians added to the heading axis.
    prefer_absolute: bool = True

    def __post_init__(self) -> None:
        if not 0.0 < self.smoothing_factor <= 1.0:
            raise ValueError("smoothing_factor must be in (0, 1]")
