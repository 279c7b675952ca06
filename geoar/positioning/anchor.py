"""Geospatial positioning engine.

``GeoAnchor`` owns the local frame: it projects geographic coordinates into
scene coordinates relative to a chosen origin, filters incoming GPS fixes and
moves the tracked camera to every accepted fix.

Scene convention: x is east, y is up, and north is -z, so the projected
northing is negated on its way into the scene.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Callable

from geoar.config import GpsConfig
from geoar.errors import PlatformError, StateError
from geoar.geo.projection import SphMercProjection
from geoar.models import FixDecision, GeoPoint, GpsCoords, GpsFix, LocalPoint, Object3D, Scene
from geoar.platform.base import LocationProvider, Subscription
from geoar.positioning.filtering import evaluate_fix

_LOG = logging.getLogger(__name__)

FixAcceptedHandler = Callable[[GpsFix, float], None]
FixRejectedHandler = Callable[[GpsFix, FixDecision], None]
GpsErrorHandler = Callable[[PlatformError], None]


class AnchorMode(Enum):
    FIXED_ORIGIN = "fixed_origin"
    FIRST_FIX_AS_ORIGIN = "first_fix_as_origin"
    NO_ORIGIN_TRANSLATION = "no_origin_translation"


def _mode_from_config(cfg: GpsConfig) -> AnchorMode:
    if cfg.initial_position is not None:
        return AnchorMode.FIXED_ORIGIN
    if cfg.initial_position_as_origin:
        return AnchorMode.FIRST_FIX_AS_ORIGIN
    return AnchorMode.NO_ORIGIN_TRANSLATION


class GeoAnchor:
    """Keeps a camera positioned in a local frame driven by GPS fixes."""

    def __init__(
        self,
        camera: Object3D,
        config: GpsConfig | None = None,
        *,
        scene: Scene | None = None,
        provider: LocationProvider | None = None,
        projection: SphMercProjection | None = None,
    ) -> None:
        self.camera = camera
        self.scene = scene
        self.provider = provider
        self.cfg = config or GpsConfig()
        self.mode = _mode_from_config(self.cfg)
        self._proj = projection or SphMercProjection()
        self._origin: GeoPoint | None = None
        self._origin_projected: LocalPoint | None = None
        self._last_coords: GpsCoords | None = None
        self._watch: Subscription | None = None
        self._on_accepted: FixAcceptedHandler | None = None
        self._on_rejected: FixRejectedHandler | None = None
        self._on_error: GpsErrorHandler | None = None
        if self.cfg.initial_position is not None:
            self.set_world_origin(
                self.cfg.initial_position.longitude, self.cfg.initial_position.latitude
            )

    @property
    def origin(self) -> GeoPoint | None:
        return self._origin

    @property
    def last_fix(self) -> GpsCoords | None:
        return self._last_coords

    @property
    def tracking(self) -> bool:
        return self._watch is not None and self._watch.active

    @property
    def uses_origin(self) -> bool:
        return self.mode is not AnchorMode.NO_ORIGIN_TRANSLATION

    def set_projection(self, projection: SphMercProjection) -> None:
        """Swap the projection. The origin is re-projected with the new one."""

        self._proj = projection
        if self._origin is not None:
            self._origin_projected = self._proj.project(
                self._origin.longitude, self._origin.latitude
            )

    def set_gps_options(
        self,
        *,
        gps_min_distance: float | None = None,
        gps_min_accuracy: float | None = None,
        maximum_age: int | None = None,
    ) -> None:
        updates: dict[str, float | int] = {}
        if gps_min_distance is not None:
            updates["gps_min_distance"] = gps_min_distance
        if gps_min_accuracy is not None:
            updates["gps_min_accuracy"] = gps_min_accuracy
        if maximum_age is not None:
            updates["maximum_age"] = maximum_age
        if updates:
            self.cfg = replace(self.cfg, **updates)

    def set_world_origin(self, lon: float, lat: float) -> None:
        """Make ``(lon, lat)`` the local frame's (0, 0).

        Objects placed earlier keep their positions; re-place them if needed.
        """

        projected = self._proj.project(lon, lat)
        self._origin = GeoPoint(float(lon), float(lat))
        self._origin_projected = projected
        if not self.uses_origin:
            _LOG.warning(
                "World origin set to (%.6f, %.6f) but this anchor does not translate by origin",
                lon,
                lat,
            )

    def set_elevation(self, elevation: float) -> None:
        self.camera.position[1] = float(elevation)

    def lon_lat_to_world_coords(self, lon: float, lat: float) -> tuple[float, float]:
        """Return scene ``(x, z)`` for a geographic position.

        Raises:
            StateError: if the anchor translates by origin and none is set yet.
            DomainError: if ``lat`` is at or beyond a pole.
        """

        return self._world_from_projected(self._proj.project(lon, lat))

    def place_object(
        self,
        obj: Object3D,
        lon: float,
        lat: float,
        elevation: float | None = None,
    ) -> None:
        """Position ``obj`` at a geographic location (y from ``elevation`` if given)."""

        x, z = self.lon_lat_to_world_coords(lon, lat)
        if elevation is not None:
            obj.position[1] = float(elevation)
        obj.position[0] = x
        obj.position[2] = z

    def add(
        self,
        obj: Object3D,
        lon: float,
        lat: float,
        elevation: float | None = None,
    ) -> None:
        """Place ``obj`` and add it to the scene."""

        if self.scene is None:
            raise StateError("GeoAnchor has no scene to add objects to")
        self.place_object(obj, lon, lat, elevation)
        self.scene.add(obj)

    def on_fix_accepted(self, handler: FixAcceptedHandler | None) -> None:
        self._on_accepted = handler

    def on_fix_rejected(self, handler: FixRejectedHandler | None) -> None:
        self._on_rejected = handler

    def on_gps_error(self, handler: GpsErrorHandler | None) -> None:
        self._on_error = handler

    def start_tracking(self, maximum_age: int = 0) -> bool:
        """Subscribe to platform fixes. Returns False if already tracking."""

        if self.tracking:
            return False
        if self.provider is None:
            raise StateError("GeoAnchor has no location provider")
        age = maximum_age if maximum_age != 0 else self.cfg.maximum_age
        self._watch = self.provider.watch_position(
            self._handle_fix,
            self._handle_error,
            enable_high_accuracy=True,
            maximum_age=age,
        )
        _LOG.debug("GPS tracking started (maximum_age=%s)", age)
        return True

    def stop_tracking(self) -> bool:
        """Cancel the platform subscription. Returns False if not tracking."""

        watch, self._watch = self._watch, None
        if watch is None or not watch.release():
            return False
        _LOG.debug("GPS tracking stopped")
        return True

    def inject_fix(self, fix: GpsFix) -> bool:
        """Feed a fix through the acceptance filter as if the platform sent it."""

        return self._process_fix(fix)

    def fake_gps(
        self,
        lon: float,
        lat: float,
        elevation: float | None = None,
        accuracy: float = 0.0,
    ) -> bool:
        return self._process_fix(
            GpsFix.from_lon_lat(lon, lat, altitude=elevation, accuracy=accuracy)
        )

    def _handle_fix(self, fix: GpsFix) -> None:
        self._process_fix(fix)

    def _handle_error(self, error: PlatformError) -> None:
        if self._on_error is not None:
            self._on_error(error)
        else:
            _LOG.error("GPS error: %s", error)

    def _process_fix(self, fix: GpsFix) -> bool:
        coords = fix.coords
        decision = evaluate_fix(coords, self._last_coords, self.cfg)
        if not decision.accepted:
            _LOG.debug(
                "Fix rejected at (%.6f, %.6f): %s",
                coords.longitude,
                coords.latitude,
                ",".join(decision.reasons),
            )
            if self._on_rejected is not None:
                self._on_rejected(fix, decision)
            return False

        projected = self._proj.project(coords.longitude, coords.latitude)
        self._last_coords = coords
        if self.mode is AnchorMode.FIRST_FIX_AS_ORIGIN and self._origin is None:
            self._origin = GeoPoint(coords.longitude, coords.latitude)
            self._origin_projected = projected
            _LOG.debug("World origin taken from first fix (%.6f, %.6f)", coords.longitude, coords.latitude)

        x, z = self._world_from_projected(projected)
        self.camera.position[0] = x
        self.camera.position[2] = z
        if coords.altitude is not None:
            self.camera.position[1] = coords.altitude
        _LOG.debug("Fix accepted, moved %.2f m", decision.distance_m)

        if self._on_accepted is not None:
            self._on_accepted(fix, decision.distance_m)
        return True

    def _world_from_projected(self, projected: LocalPoint) -> tuple[float, float]:
        x, y = projected.x, projected.y
        if self.uses_origin:
            if self._origin_projected is None:
                raise StateError(
                    "Cannot convert to world coordinates: origin translation is enabled "
                    "but no origin has been established"
                )
            x -= self._origin_projected.x
            y -= self._origin_projected.y
        return x, -y
