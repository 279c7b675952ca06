"""Platform service interfaces and in-memory implementations."""

from geoar.platform.base import (
    PERMISSION_GRANTED,
    LocationProvider,
    OrientationProvider,
    PermissionProvider,
    Subscription,
)
from geoar.platform.simulated import (
    SimulatedLocationProvider,
    SimulatedOrientationProvider,
    SimulatedPermissionProvider,
)

__all__ = [
    "PERMISSION_GRANTED",
    "LocationProvider",
    "OrientationProvider",
    "PermissionProvider",
    "SimulatedLocationProvider",
    "SimulatedOrientationProvider",
    "SimulatedPermissionProvider",
    "Subscription",
]
