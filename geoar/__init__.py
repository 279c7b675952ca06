"""Location-based AR core: GPS anchoring and device orientation fusion."""

from geoar.config import GpsConfig, OrientationConfig
from geoar.errors import DomainError, GeoArError, PlatformError, StateError
from geoar.models import GeoPoint, GpsCoords, GpsFix, LocalPoint, Object3D, RawOrientationSample
from geoar.orientation.fuser import OrientationFuser, SmoothingMode
from geoar.positioning.anchor import AnchorMode, GeoAnchor

__all__ = [
    "AnchorMode",
    "DomainError",
    "GeoAnchor",
    "GeoArError",
    "GeoPoint",
    "GpsConfig",
    "GpsCoords",
    "GpsFix",
    "LocalPoint",
    "Object3D",
    "OrientationConfig",
    "OrientationFuser",
    "PlatformError",
    "RawOrientationSample",
    "SmoothingMode",
    "StateError",
]
