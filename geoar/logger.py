"""CSV pose logs for replay runs."""

from __future__ import annotations

import csv
from dataclasses import fields
from pathlib import Path

import numpy as np

from geoar.models import PoseLog

POSE_CSV_COLUMNS = [f.name for f in fields(PoseLog)]
_CSV_HEADER = ",".join(POSE_CSV_COLUMNS) + "\n"


def save_poses_csv(path: str | Path, poses: list[PoseLog]) -> None:
    target = Path(path)
    target.write_text(_CSV_HEADER)
    with target.open("a", encoding="utf-8") as handle:
        for pose in poses:
            handle.write(_pose_to_csv_line(pose))


def load_positions_csv(path: str | Path) -> np.ndarray:
    """Load camera positions from a pose CSV as an (N, 3) array."""

    with Path(path).open(newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    if not rows:
        return np.empty((0, 3), dtype=float)
    return np.array(
        [[float(row["pos_x"]), float(row["pos_y"]), float(row["pos_z"])] for row in rows],
        dtype=float,
    )


def _pose_to_csv_line(pose: PoseLog) -> str:
    row = [
        pose.tick,
        _format_value(pose.pos_x),
        _format_value(pose.pos_y),
        _format_value(pose.pos_z),
        _format_value(pose.quat_x),
        _format_value(pose.quat_y),
        _format_value(pose.quat_z),
        _format_value(pose.quat_w),
        _format_value(pose.fix_accepted),
        _format_value(pose.fix_distance_m),
        "|".join(pose.fix_reasons),
        _format_value(pose.rotation_changed),
    ]
    return ",".join(str(value) for value in row) + "\n"


def _format_value(value: float | int | bool | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)
