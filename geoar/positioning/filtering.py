"""Fix acceptance filter."""

from __future__ import annotations

import math

from geoar.config import GpsConfig
from geoar.geo.distance import haversine_distance
from geoar.models import FixDecision, GpsCoords


def evaluate_fix(coords: GpsCoords, last: GpsCoords | None, cfg: GpsConfig) -> FixDecision:
    """Decide whether a fix should be applied.

    Fixes with a reported accuracy worse than ``gps_min_accuracy`` are always
    rejected. The first usable fix is accepted with an unbounded distance;
    later fixes need to have moved at least ``gps_min_distance`` metres from
    the last accepted one.
    """

    if coords.accuracy is not None and coords.accuracy > cfg.gps_min_accuracy:
        return FixDecision(accepted=False, distance_m=math.nan, reasons=("accuracy",))
    if last is None:
        return FixDecision(accepted=True, distance_m=math.inf)
    distance_m = haversine_distance(last, coords)
    if distance_m < cfg.gps_min_distance:
        return FixDecision(accepted=False, distance_m=distance_m, reasons=("min_distance",))
    return FixDecision(accepted=True, distance_m=distance_m)
