"""NMEA GGA parsing and formatting."""

from .sentences import (
    DEFAULT_UERE_M,
    build_gga,
    format_coord,
    format_time_hhmmss,
    nmea_checksum,
    parse_gga,
    read_nmea_fixes,
    wrap_sentence,
)

__all__ = [
    "DEFAULT_UERE_M",
    "nmea_checksum",
    "wrap_sentence",
    "format_coord",
    "format_time_hhmmss",
    "build_gga",
    "parse_gga",
    "read_nmea_fixes",
]
