"""Platform service interfaces consumed by the engines."""

from __future__ import annotations

from typing import Callable, Protocol

from geoar.errors import PlatformError
from geoar.models import GpsFix, RawOrientationSample

FixCallback = Callable[[GpsFix], None]
ErrorCallback = Callable[[PlatformError], None]
SampleCallback = Callable[[RawOrientationSample], None]
ScreenCallback = Callable[[], None]

PERMISSION_GRANTED = "granted"


class Subscription:
    """Handle for an active platform subscription.

    ``release`` runs the cancel callback exactly once, no matter how often it
    is called. Also usable as a context manager.
    """

    def __init__(self, cancel: Callable[[], None], name: str = "") -> None:
        self._cancel: Callable[[], None] | None = cancel
        self.name = name

    @property
    def active(self) -> bool:
        return self._cancel is not None

    def release(self) -> bool:
        """Cancel the subscription. Returns False if it was already released."""

        cancel, self._cancel = self._cancel, None
        if cancel is None:
            return False
        cancel()
        return True

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "active" if self.active else "released"
        return f"Subscription({self.name!r}, {state})"


class LocationProvider(Protocol):
    """Push-based geolocation service."""

    def watch_position(
        self,
        on_fix: FixCallback,
        on_error: ErrorCallback,
        *,
        enable_high_accuracy: bool = True,
        maximum_age: int = 0,
    ) -> Subscription:
        """Start delivering fixes until the returned handle is released."""


class OrientationProvider(Protocol):
    """Device orientation and screen rotation notifications."""

    @property
    def supports_absolute(self) -> bool:
        """True when absolute (north-referenced) samples are available."""

    def subscribe_orientation(self, on_sample: SampleCallback, *, absolute: bool) -> Subscription:
        """Deliver orientation samples until the handle is released."""

    def subscribe_screen_orientation(self, on_change: ScreenCallback) -> Subscription:
        """Notify screen rotation changes until the handle is released."""

    def screen_orientation(self) -> float:
        """Current screen rotation in degrees."""


class PermissionProvider(Protocol):
    """Motion-sensor permission gate (a no-op on most platforms)."""

    @property
    def requires_permission(self) -> bool:
        """True if :meth:`request_permission` must succeed before subscribing."""

    def request_permission(self) -> str:
        """Ask for motion access; returns ``"granted"`` on success.

        May raise :class:`PlatformError` if the request itself fails.
        """
