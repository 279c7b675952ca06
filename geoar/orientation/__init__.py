"""Device orientation fusion."""

from geoar.orientation.fuser import OrientationFuser, SmoothingMode
from geoar.orientation.rotation import camera_forward, device_quaternion, quaternion_change
from geoar.orientation.smoothing import order_angles, smooth_angle

__all__ = [
    "OrientationFuser",
    "SmoothingMode",
    "camera_forward",
    "device_quaternion",
    "order_angles",
    "quaternion_change",
    "smooth_angle",
]
