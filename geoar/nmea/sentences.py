"""Minimal NMEA 0183 GGA support for replaying recorded receiver output."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

from geoar.models import GpsFix

# Typical consumer-receiver user equivalent range error, metres.
DEFAULT_UERE_M = 5.0


def nmea_checksum(payload: str) -> str:
    """Return the NMEA XOR checksum as a 2-digit uppercase hex string."""
    checksum = 0
    for char in payload:
        checksum ^= ord(char)
    return f"{checksum:02X}"


def wrap_sentence(payload: str) -> str:
    return f"${payload}*{nmea_checksum(payload)}\r\n"


def format_coord(value_deg: float, *, degree_digits: int, hemispheres: str) -> tuple[str, str]:
    """Format a coordinate as d(d)dmm.mmmm plus hemisphere letter.

    ``hemispheres`` is the positive/negative letter pair, e.g. ``"NS"``.
    """
    hemisphere = hemispheres[0] if value_deg >= 0 else hemispheres[1]
    degrees = int(abs(value_deg))
    minutes = (abs(value_deg) - degrees) * 60.0
    return f"{degrees:0{degree_digits}d}{minutes:07.4f}", hemisphere


def format_time_hhmmss(t_utc: datetime) -> str:
    """Format UTC time of day as hhmmss.ss (rounded to hundredths)."""
    rounded = t_utc + timedelta(microseconds=5000)
    return rounded.strftime("%H%M%S.") + f"{rounded.microsecond // 10000:02d}"


def build_gga(
    t_utc: datetime,
    lat_deg: float,
    lon_deg: float,
    alt_m: float,
    *,
    valid: bool = True,
    num_sats: int = 8,
    hdop: float = 0.9,
    talker: str = "GN",
) -> str:
    """Build a GGA sentence, e.g. to emit a simulated track as an NMEA log."""
    lat_str, ns = format_coord(lat_deg, degree_digits=2, hemispheres="NS")
    lon_str, ew = format_coord(lon_deg, degree_digits=3, hemispheres="EW")
    payload = (
        f"{talker}GGA,{format_time_hhmmss(t_utc)},{lat_str},{ns},{lon_str},{ew},"
        f"{1 if valid else 0},{num_sats:02d},{hdop:.1f},{alt_m:.1f},M,0.0,M,,"
    )
    return wrap_sentence(payload)


def parse_gga(sentence: str, uere_m: float = DEFAULT_UERE_M) -> GpsFix | None:
    """Parse a GGA sentence into a fix.

    Accuracy is estimated as ``HDOP * uere_m``. Returns None when the
    receiver reports no fix.

    Raises:
        ValueError: on a malformed sentence or checksum mismatch.
    """

    payload = _strip_and_verify(sentence)
    parts = payload.split(",")
    if len(parts) < 10 or not parts[0].endswith("GGA"):
        raise ValueError(f"Not a GGA sentence: {sentence.strip()!r}")

    quality = int(parts[6] or 0)
    if quality == 0 or not parts[2] or not parts[4]:
        return None

    lat = _parse_coord(parts[2], parts[3], degree_digits=2)
    lon = _parse_coord(parts[4], parts[5], degree_digits=3)
    hdop = float(parts[8]) if parts[8] else None
    altitude = float(parts[9]) if parts[9] else None
    return GpsFix.from_lon_lat(
        lon,
        lat,
        altitude=altitude,
        accuracy=(hdop * uere_m if hdop is not None else None),
        timestamp=_parse_time_of_day(parts[1]),
    )


def read_nmea_fixes(path: str | Path, uere_m: float = DEFAULT_UERE_M) -> list[GpsFix]:
    """Read every GGA fix in an NMEA log, skipping other sentences and no-fix epochs."""

    fixes: list[GpsFix] = []
    with Path(path).open(encoding="ascii", errors="replace") as handle:
        for line in handle:
            line = line.strip()
            if not line.startswith("$") or line[3:6] != "GGA":
                continue
            fix = parse_gga(line, uere_m=uere_m)
            if fix is not None:
                fixes.append(fix)
    return fixes


def _strip_and_verify(sentence: str) -> str:
    text = sentence.strip()
    if not text.startswith("$"):
        raise ValueError(f"NMEA sentence must start with '$': {text!r}")
    body = text[1:]
    if "*" not in body:
        return body
    payload, checksum = body.rsplit("*", 1)
    if checksum.upper() != nmea_checksum(payload):
        raise ValueError(f"NMEA checksum mismatch in {text!r}")
    return payload


def _parse_coord(value: str, hemisphere: str, *, degree_digits: int) -> float:
    degrees = int(value[:degree_digits])
    minutes = float(value[degree_digits:])
    coord = degrees + minutes / 60.0
    return -coord if hemisphere in {"S", "W"} else coord


def _parse_time_of_day(value: str) -> float | None:
    if len(value) < 6:
        return None
    return int(value[0:2]) * 3600.0 + int(value[2:4]) * 60.0 + float(value[4:])
