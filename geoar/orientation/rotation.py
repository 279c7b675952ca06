"""Device attitude to camera quaternion."""

from __future__ import annotations

import numpy as np
from scipy.spatial.transform import Rotation

# -90 degrees about X: the camera looks out of the back of the device, not the top edge.
_BACK_CAMERA = Rotation.from_rotvec([-np.pi / 2.0, 0.0, 0.0])

CHANGE_EPS = 1e-6


def device_quaternion(alpha: float, beta: float, gamma: float, orient: float) -> np.ndarray:
    """Return the camera quaternion ``[x, y, z, w]`` for a device attitude.

    Args:
        alpha: Heading about the device Z axis, radians.
        beta: Front/back tilt about X', radians.
        gamma: Left/right tilt about Y'', radians.
        orient: Screen orientation angle, radians.
    """

    # Z-X'-Y'' for the device is Y-X-Z intrinsic in a y-up scene.
    attitude = Rotation.from_euler("YXZ", [alpha, beta, -gamma])
    screen = Rotation.from_rotvec([0.0, 0.0, -orient])
    return (attitude * _BACK_CAMERA * screen).as_quat()


def quaternion_change(q_prev: np.ndarray, q_next: np.ndarray) -> float:
    """Dot-product distance between two unit quaternions (0 when equal)."""

    # q and -q are the same rotation.
    return float(8.0 * (1.0 - abs(float(np.dot(q_prev, q_next)))))


def camera_forward(quaternion: np.ndarray) -> np.ndarray:
    """World direction of the camera's -Z viewing axis."""

    return Rotation.from_quat(quaternion).apply([0.0, 0.0, -1.0])
