"""GPS-driven positioning in a local scene frame."""

from geoar.positioning.anchor import AnchorMode, GeoAnchor
from geoar.positioning.filtering import evaluate_fix

__all__ = ["AnchorMode", "GeoAnchor", "evaluate_fix"]
