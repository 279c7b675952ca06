"""Error taxonomy for geoar."""

from __future__ import annotations

from geoar.models import GeolocationErrorCode


class GeoArError(Exception):
    """Base class for all geoar errors."""


class DomainError(GeoArError, ValueError):
    """A pure function was called outside its mathematical domain."""


class StateError(GeoArError, RuntimeError):
    """An operation was attempted before its required state existed."""


class PlatformError(GeoArError):
    """A platform service (geolocation, motion permission) reported a failure."""

    def __init__(self, message: str, code: GeolocationErrorCode | int | None = None) -> None:
        super().__init__(message)
        self.code = code

    def __str__(self) -> str:
        base = super().__str__()
        if self.code is None:
            return base
        return f"{base} (code {int(self.code)})"
