"""Orientation engine: device orientation samples to a camera quaternion."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from enum import Enum
from typing import Callable

import numpy as np

from geoar.config import OrientationConfig
from geoar.errors import PlatformError, StateError
from geoar.models import GeolocationErrorCode, Object3D, RawOrientationSample, SmoothedOrientation
from geoar.orientation.rotation import CHANGE_EPS, device_quaternion, quaternion_change
from geoar.orientation.smoothing import HALF_PI, smooth_angle
from geoar.platform.base import (
    PERMISSION_GRANTED,
    OrientationProvider,
    PermissionProvider,
    Subscription,
)

_LOG = logging.getLogger(__name__)

ChangeListener = Callable[[np.ndarray], None]
ErrorHandler = Callable[[PlatformError], None]


class SmoothingMode(Enum):
    PASSTHROUGH = "passthrough"
    BLEND = "blend"


def smoothing_mode_for(factor: float) -> SmoothingMode:
    return SmoothingMode.BLEND if factor < 1.0 else SmoothingMode.PASSTHROUGH


class OrientationFuser:
    """Keeps an object's rotation aligned with the physical device.

    Samples overwrite a single "latest" slot; :meth:`update` is driven by the
    render loop and only ever looks at the most recent sample.
    """

    def __init__(
        self,
        obj: Object3D,
        provider: OrientationProvider,
        config: OrientationConfig | None = None,
        *,
        permissions: PermissionProvider | None = None,
    ) -> None:
        self.object = obj
        self.provider = provider
        self.permissions = permissions
        self.cfg = config or OrientationConfig()
        self.mode = smoothing_mode_for(self.cfg.smoothing_factor)
        self.enabled = True
        self.screen_orientation = 0.0
        self._sample: RawOrientationSample | None = None
        self._smoothed: SmoothedOrientation | None = None
        self._last_quaternion = np.array([0.0, 0.0, 0.0, 1.0], dtype=float)
        self._subscriptions: list[Subscription] = []
        self._listeners: list[ChangeListener] = []
        self._on_error: ErrorHandler | None = None
        self._disposed = False

    @property
    def connected(self) -> bool:
        return any(sub.active for sub in self._subscriptions)

    @property
    def smoothing_factor(self) -> float:
        return self.cfg.smoothing_factor

    @smoothing_factor.setter
    def smoothing_factor(self, value: float) -> None:
        self.cfg = replace(self.cfg, smoothing_factor=value)
        self.mode = smoothing_mode_for(value)
        if self.mode is SmoothingMode.PASSTHROUGH:
            self._smoothed = None

    @property
    def alpha_offset(self) -> float:
        return self.cfg.alpha_offset

    @alpha_offset.setter
    def alpha_offset(self, value: float) -> None:
        self.cfg = replace(self.cfg, alpha_offset=value)

    @property
    def latest_sample(self) -> RawOrientationSample | None:
        return self._sample

    @property
    def smoothed(self) -> SmoothedOrientation | None:
        return self._smoothed

    def add_change_listener(self, listener: ChangeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def on_error(self, handler: ErrorHandler | None) -> None:
        self._on_error = handler

    def connect(self) -> bool:
        """Subscribe to orientation and screen-rotation notifications.

        When the platform gates motion sensors behind a permission, it is
        requested first; on refusal the fuser stays disconnected.
        Returns True when subscribed.
        """

        if self._disposed:
            raise StateError("OrientationFuser has been disposed")
        if self.connected:
            return True

        self._read_screen_orientation()

        if self.permissions is not None and self.permissions.requires_permission:
            try:
                response = self.permissions.request_permission()
            except PlatformError as exc:
                self._report(exc)
                return False
            if response != PERMISSION_GRANTED:
                self._report(
                    PlatformError(
                        f"motion sensor permission {response!r}",
                        code=GeolocationErrorCode.PERMISSION_DENIED,
                    )
                )
                return False

        absolute = self.cfg.prefer_absolute and self.provider.supports_absolute
        self._subscriptions = [
            self.provider.subscribe_screen_orientation(self._read_screen_orientation),
            self.provider.subscribe_orientation(self._store_sample, absolute=absolute),
        ]
        self.enabled = True
        _LOG.debug("Orientation connected (absolute=%s)", absolute)
        return True

    def disconnect(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for sub in subscriptions:
            sub.release()
        self.enabled = False

    def dispose(self) -> None:
        self.disconnect()
        self._sample = None
        self._smoothed = None
        self._listeners.clear()
        self._on_error = None
        self._disposed = True

    def reset_smoothing(self) -> None:
        self._smoothed = None

    def update(self) -> bool:
        """Recompute and apply the camera rotation.

        Returns True when the rotation changed enough to notify listeners.
        """

        sample = self._sample
        if not self.enabled or sample is None or sample.is_empty:
            return False

        alpha = _deg_or_zero(sample.alpha) + self.cfg.alpha_offset
        beta = _deg_or_zero(sample.beta)
        gamma = _deg_or_zero(sample.gamma)
        orient = math.radians(self.screen_orientation)

        if self.mode is SmoothingMode.BLEND:
            alpha, beta, gamma = self._blend(alpha, beta, gamma)

        quaternion = device_quaternion(alpha, beta, gamma, orient)
        self.object.quaternion[:] = quaternion

        if quaternion_change(self._last_quaternion, quaternion) <= CHANGE_EPS:
            return False
        self._last_quaternion = quaternion.copy()
        for listener in list(self._listeners):
            listener(quaternion.copy())
        return True

    def _blend(self, alpha: float, beta: float, gamma: float) -> tuple[float, float, float]:
        # Beta spans a full turn and gamma half a turn; shift both to start at zero.
        beta += math.pi
        gamma += HALF_PI
        previous = self._smoothed
        if previous is not None:
            k = self.cfg.smoothing_factor
            alpha = smooth_angle(alpha, previous.alpha, k)
            beta = smooth_angle(beta, previous.beta, k)
            gamma = smooth_angle(gamma, previous.gamma, k, math.pi)
        self._smoothed = SmoothedOrientation(alpha, beta, gamma)
        return alpha, beta - math.pi, gamma - HALF_PI

    def _store_sample(self, sample: RawOrientationSample) -> None:
        self._sample = sample

    def _read_screen_orientation(self) -> None:
        self.screen_orientation = float(self.provider.screen_orientation() or 0.0)

    def _report(self, error: PlatformError) -> None:
        if self._on_error is not None:
            self._on_error(error)
        else:
            _LOG.error("Unable to use device orientation: %s", error)


def _deg_or_zero(value: float | None) -> float:
    return math.radians(value) if value is not None else 0.0
