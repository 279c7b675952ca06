"""In-memory platform providers for tests and headless replay."""

from __future__ import annotations

from dataclasses import dataclass, field

from geoar.errors import PlatformError
from geoar.models import GeolocationErrorCode, GpsFix, RawOrientationSample
from geoar.platform.base import (
    PERMISSION_GRANTED,
    ErrorCallback,
    FixCallback,
    SampleCallback,
    ScreenCallback,
    Subscription,
)


@dataclass
class _Watch:
    on_fix: FixCallback
    on_error: ErrorCallback
    enable_high_accuracy: bool
    maximum_age: int


class SimulatedLocationProvider:
    """Location provider driven by explicit ``push_fix``/``push_error`` calls."""

    def __init__(self) -> None:
        self._watches: dict[int, _Watch] = {}
        self._next_id = 1

    @property
    def watch_count(self) -> int:
        return len(self._watches)

    def last_options(self) -> dict[str, object] | None:
        if not self._watches:
            return None
        watch = self._watches[max(self._watches)]
        return {
            "enable_high_accuracy": watch.enable_high_accuracy,
            "maximum_age": watch.maximum_age,
        }

    def watch_position(
        self,
        on_fix: FixCallback,
        on_error: ErrorCallback,
        *,
        enable_high_accuracy: bool = True,
        maximum_age: int = 0,
    ) -> Subscription:
        watch_id = self._next_id
        self._next_id += 1
        self._watches[watch_id] = _Watch(on_fix, on_error, enable_high_accuracy, maximum_age)
        return Subscription(lambda: self._watches.pop(watch_id, None), name=f"geolocation#{watch_id}")

    def push_fix(self, fix: GpsFix) -> None:
        # Copy so handlers may stop tracking mid-dispatch.
        for watch in list(self._watches.values()):
            watch.on_fix(fix)

    def push_error(self, code: GeolocationErrorCode | int, message: str = "") -> None:
        error = PlatformError(message or "geolocation failure", code=_error_code(code))
        for watch in list(self._watches.values()):
            watch.on_error(error)


class SimulatedOrientationProvider:
    """Orientation provider driven by ``push_sample``/``rotate_screen`` calls."""

    def __init__(self, *, supports_absolute: bool = True, screen_angle: float = 0.0) -> None:
        self._supports_absolute = supports_absolute
        self._screen_angle = float(screen_angle)
        self._sample_listeners: dict[int, tuple[SampleCallback, bool]] = {}
        self._screen_listeners: dict[int, ScreenCallback] = {}
        self._next_id = 1

    @property
    def supports_absolute(self) -> bool:
        return self._supports_absolute

    @property
    def listener_count(self) -> int:
        return len(self._sample_listeners) + len(self._screen_listeners)

    def subscribe_orientation(self, on_sample: SampleCallback, *, absolute: bool) -> Subscription:
        key = self._take_id()
        self._sample_listeners[key] = (on_sample, absolute and self._supports_absolute)
        return Subscription(lambda: self._sample_listeners.pop(key, None), name="deviceorientation")

    def subscribe_screen_orientation(self, on_change: ScreenCallback) -> Subscription:
        key = self._take_id()
        self._screen_listeners[key] = on_change
        return Subscription(lambda: self._screen_listeners.pop(key, None), name="orientationchange")

    def screen_orientation(self) -> float:
        return self._screen_angle

    def push_sample(
        self,
        alpha: float | None,
        beta: float | None,
        gamma: float | None,
    ) -> None:
        for on_sample, absolute in list(self._sample_listeners.values()):
            on_sample(RawOrientationSample(alpha, beta, gamma, absolute=absolute))

    def rotate_screen(self, angle_deg: float) -> None:
        self._screen_angle = float(angle_deg)
        for on_change in list(self._screen_listeners.values()):
            on_change()

    def _take_id(self) -> int:
        key = self._next_id
        self._next_id += 1
        return key


@dataclass
class SimulatedPermissionProvider:
    """Permission gate with a scripted answer.

    ``response`` is returned from :meth:`request_permission`; ``error`` (if set)
    is raised instead.
    """

    requires_permission: bool = True
    response: str = PERMISSION_GRANTED
    error: PlatformError | None = None
    requests: int = field(default=0, init=False)

    def request_permission(self) -> str:
        self.requests += 1
        if self.error is not None:
            raise self.error
        return self.response


def _error_code(code: int) -> GeolocationErrorCode | int:
    # Codes outside the W3C set are passed through unchanged.
    known = {member.value for member in GeolocationErrorCode}
    return GeolocationErrorCode(code) if code in known else int(code)
