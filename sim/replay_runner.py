"""Headless replay of recorded or scripted AR sessions."""

from __future__ import annotations

import csv
import json
import logging
import math
import warnings
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from geoar.config import GpsConfig, OrientationConfig
from geoar.errors import PlatformError
from geoar.logger import load_positions_csv, save_poses_csv
from geoar.models import FixDecision, GeoPoint, GpsFix, Object3D, PoseLog, SimpleScene
from geoar.nmea import read_nmea_fixes
from geoar.orientation.fuser import OrientationFuser
from geoar.platform.simulated import SimulatedLocationProvider, SimulatedOrientationProvider
from geoar.positioning.anchor import GeoAnchor

_LOG = logging.getLogger(__name__)

_SCENARIO_KEYS = {"name", "gps", "orientation", "screen_orientation", "steps", "nmea", "objects"}
_STEP_KEYS = {"fix", "sample", "screen", "error"}


@dataclass
class _TickOutcome:
    accepted: bool | None = None
    distance_m: float | None = None
    reasons: tuple[str, ...] = ()


@dataclass
class ReplayStats:
    fixes_accepted: int = 0
    fixes_rejected: int = 0
    gps_errors: int = 0
    rotation_changes: int = 0
    distance_m: float = 0.0
    reject_reasons: dict[str, int] = field(default_factory=dict)


def run_scenarios(
    scenario_paths: list[Path],
    *,
    run_root: Path = Path("runs"),
    save_figs: bool = True,
) -> list[dict[str, Any]]:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    summaries: list[dict[str, Any]] = []
    run_root.mkdir(parents=True, exist_ok=True)

    for path in scenario_paths:
        scenario = load_scenario(path)
        scenario_name = str(scenario["name"])
        run_dir = run_root / f"{timestamp}_{_slugify(scenario_name)}"
        summary = run_replay(scenario, run_dir, save_figs=save_figs, base_dir=path.parent)
        (run_dir / "summary.json").write_text(json.dumps(_sanitize_json(summary), indent=2, allow_nan=False))
        summaries.append(summary)
        _append_summary_csv(run_root / "summary.csv", summary)

    return summaries


def load_scenario(path: Path) -> dict[str, Any]:
    scenario = json.loads(path.read_text())
    if "name" not in scenario:
        raise ValueError(f"Scenario {path} missing required key 'name'")
    unknown = set(scenario) - _SCENARIO_KEYS
    if unknown:
        raise ValueError(f"Unknown keys {sorted(unknown)} in scenario '{scenario['name']}'")
    if not scenario.get("steps") and not scenario.get("nmea"):
        raise ValueError(f"Scenario '{scenario['name']}' needs 'steps' or 'nmea'")
    return scenario


def build_gps_config(overrides: dict[str, Any] | None) -> GpsConfig:
    values = dict(overrides or {})
    known = {f.name for f in fields(GpsConfig)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown GPS options: {sorted(unknown)}")
    initial = values.get("initial_position")
    if initial is not None:
        values["initial_position"] = GeoPoint(float(initial["lon"]), float(initial["lat"]))
    return GpsConfig(**values)


def build_orientation_config(overrides: dict[str, Any] | None) -> OrientationConfig:
    values = dict(overrides or {})
    known = {f.name for f in fields(OrientationConfig)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown orientation options: {sorted(unknown)}")
    return OrientationConfig(**values)


def run_replay(
    scenario: dict[str, Any],
    run_dir: Path,
    *,
    save_figs: bool = True,
    base_dir: Path | None = None,
) -> dict[str, Any]:
    """Replay a scenario tick by tick and write ``poses.csv`` into ``run_dir``."""

    run_dir.mkdir(parents=True, exist_ok=True)
    steps = _expand_steps(scenario, base_dir or Path("."))

    camera = Object3D(name="camera")
    scene = SimpleScene()
    location = SimulatedLocationProvider()
    orientation = SimulatedOrientationProvider(
        screen_angle=float(scenario.get("screen_orientation", 0.0))
    )
    anchor = GeoAnchor(camera, build_gps_config(scenario.get("gps")), scene=scene, provider=location)
    fuser = OrientationFuser(camera, orientation, build_orientation_config(scenario.get("orientation")))

    stats = ReplayStats()
    outcome = _TickOutcome()

    def on_accepted(fix: GpsFix, distance_m: float) -> None:
        stats.fixes_accepted += 1
        if math.isfinite(distance_m):
            stats.distance_m += distance_m
        outcome.accepted = True
        outcome.distance_m = distance_m

    def on_rejected(fix: GpsFix, decision: FixDecision) -> None:
        stats.fixes_rejected += 1
        for reason in decision.reasons:
            stats.reject_reasons[reason] = stats.reject_reasons.get(reason, 0) + 1
        outcome.accepted = False
        outcome.distance_m = decision.distance_m
        outcome.reasons = decision.reasons

    def on_error(error: PlatformError) -> None:
        stats.gps_errors += 1
        _LOG.warning("GPS error during replay: %s", error)

    anchor.on_fix_accepted(on_accepted)
    anchor.on_fix_rejected(on_rejected)
    anchor.on_gps_error(on_error)
    anchor.start_tracking()
    fuser.connect()

    poses: list[PoseLog] = []
    try:
        for tick, step in enumerate(steps):
            outcome.accepted, outcome.distance_m, outcome.reasons = None, None, ()
            if "screen" in step:
                orientation.rotate_screen(float(step["screen"]))
            if "sample" in step:
                sample = step["sample"]
                orientation.push_sample(sample.get("alpha"), sample.get("beta"), sample.get("gamma"))
            if "error" in step:
                location.push_error(int(step["error"]))
            if "fix" in step:
                location.push_fix(step["fix"])
            changed = fuser.update()
            if changed:
                stats.rotation_changes += 1
            poses.append(
                PoseLog(
                    tick=tick,
                    pos_x=float(camera.position[0]),
                    pos_y=float(camera.position[1]),
                    pos_z=float(camera.position[2]),
                    quat_x=float(camera.quaternion[0]),
                    quat_y=float(camera.quaternion[1]),
                    quat_z=float(camera.quaternion[2]),
                    quat_w=float(camera.quaternion[3]),
                    fix_accepted=outcome.accepted,
                    fix_distance_m=outcome.distance_m,
                    fix_reasons=outcome.reasons,
                    rotation_changed=changed,
                )
            )
    finally:
        anchor.stop_tracking()
        fuser.dispose()

    placed = _place_objects(anchor, scenario.get("objects") or [])

    poses_path = run_dir / "poses.csv"
    save_poses_csv(poses_path, poses)
    if save_figs:
        from geoar.plots import plot_track

        plot_track(load_positions_csv(poses_path), run_dir / "track.png", title=str(scenario["name"]))

    origin = anchor.origin
    return {
        "scenario": str(scenario["name"]),
        "run_dir": str(run_dir),
        "ticks": len(steps),
        "fixes_accepted": stats.fixes_accepted,
        "fixes_rejected": stats.fixes_rejected,
        "reject_reasons": dict(sorted(stats.reject_reasons.items())),
        "gps_errors": stats.gps_errors,
        "rotation_changes": stats.rotation_changes,
        "distance_m": stats.distance_m,
        "origin_lon": origin.longitude if origin else float("nan"),
        "origin_lat": origin.latitude if origin else float("nan"),
        "final_x": float(camera.position[0]),
        "final_y": float(camera.position[1]),
        "final_z": float(camera.position[2]),
        "objects": placed,
    }


def _expand_steps(scenario: dict[str, Any], base_dir: Path) -> list[dict[str, Any]]:
    steps: list[dict[str, Any]] = []
    for raw in scenario.get("steps") or []:
        unknown = set(raw) - _STEP_KEYS
        if unknown:
            warnings.warn(f"Ignoring unknown step keys: {sorted(unknown)}", stacklevel=2)
        step = {key: value for key, value in raw.items() if key in _STEP_KEYS}
        if "fix" in step:
            step["fix"] = _fix_from_json(step["fix"])
        steps.append(step)
    nmea = scenario.get("nmea")
    if nmea:
        nmea_path = Path(nmea)
        if not nmea_path.is_absolute():
            nmea_path = base_dir / nmea_path
        steps.extend({"fix": fix} for fix in read_nmea_fixes(nmea_path))
    return steps


def _fix_from_json(payload: dict[str, Any]) -> GpsFix:
    return GpsFix.from_lon_lat(
        payload["lon"],
        payload["lat"],
        altitude=payload.get("alt"),
        accuracy=payload.get("acc"),
        timestamp=payload.get("t"),
    )


def _place_objects(anchor: GeoAnchor, objects: list[dict[str, Any]]) -> list[dict[str, Any]]:
    placed: list[dict[str, Any]] = []
    for entry in objects:
        obj = Object3D(name=str(entry.get("name", f"object{len(placed)}")))
        anchor.add(obj, float(entry["lon"]), float(entry["lat"]), entry.get("elev"))
        placed.append(
            {
                "name": obj.name,
                "x": float(obj.position[0]),
                "y": float(obj.position[1]),
                "z": float(obj.position[2]),
            }
        )
    return placed


def _slugify(name: str) -> str:
    return "".join(char if char.isalnum() or char in "-_." else "_" for char in name.lower())


def _sanitize_json(value: Any) -> Any:
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: _sanitize_json(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_sanitize_json(item) for item in value]
    return value


def _append_summary_csv(path: Path, summary: dict[str, Any]) -> None:
    columns = [key for key, value in summary.items() if not isinstance(value, (dict, list))]
    write_header = not path.exists()
    with path.open("a", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=columns)
        if write_header:
            writer.writeheader()
        writer.writerow({key: summary[key] for key in columns})
