"""geoar command-line entrypoint.

Runs recorded or scripted sessions headlessly and writes pose logs, a summary
and a track plot per scenario.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from geoar.utils.logging import get_logger


def _cmd_replay(args: argparse.Namespace) -> None:
    from sim.replay_runner import run_scenarios

    scenarios = [Path(p) for p in (args.scenario or [])]
    if not scenarios:
        raise SystemExit("No scenarios provided. Use --scenario path.json (repeatable).")

    logger = get_logger("geoar", level=getattr(logging, args.log_level.upper()))
    summaries = run_scenarios(
        scenarios,
        run_root=Path(args.run_root),
        save_figs=not args.no_plots,
    )
    for summary in summaries:
        logger.info(
            "%s: %d accepted, %d rejected, %.1f m travelled -> %s",
            summary["scenario"],
            summary["fixes_accepted"],
            summary["fixes_rejected"],
            summary["distance_m"],
            summary["run_dir"],
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="geoar", description="Location-based AR replay runner")
    sub = parser.add_subparsers(dest="cmd", required=True)

    replay = sub.add_parser("replay", help="Replay one or more JSON scenarios (headless)")
    replay.add_argument("--scenario", action="append", help="Path to a scenario JSON file (repeatable)")
    replay.add_argument("--run-root", type=str, default="runs", help="Root folder for replay outputs")
    replay.add_argument("--no-plots", action="store_true", help="Skip saving the track plot")
    replay.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging verbosity",
    )
    replay.set_defaults(func=_cmd_replay)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
