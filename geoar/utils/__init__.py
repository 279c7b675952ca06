"""Utilities for geoar.

NOTE: Keep this package lightweight.
Avoid importing heavy/optional dependencies (matplotlib, scipy, ...) at import time.
"""

from geoar.utils.logging import get_logger

__all__ = ["get_logger"]
