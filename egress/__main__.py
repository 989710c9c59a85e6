"""Module entry point for `python -m egress`."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from egress.app import DEFAULT_AGENT_COUNT, resolve_log_level, run_evacuation
from egress.db.replay_log import RUN_LOG_NAME
from egress.render.live_tail import tail_replay_log
from egress.render.replay_reader import read_header, read_tick_payloads
from egress.render.viewer import render_run_header, render_stats, render_tick
from egress.sim.building_loader import DEFAULT_BUILDING_PATH
from egress.sim.profiles import DEFAULT_PROFILE_ID

DEFAULT_REPLAY_DIR = Path("replay")
DEFAULT_STRIDE = 20


def main() -> None:
    parser = argparse.ArgumentParser(description="Run an evacuation drill.")
    parser.add_argument(
        "--building",
        type=Path,
        default=DEFAULT_BUILDING_PATH,
        help="Building description (JSON) to evacuate.",
    )
    parser.add_argument(
        "--profiles",
        type=Path,
        default=None,
        help="Agent profile catalog (JSON). Defaults to the built-in profiles.",
    )
    parser.add_argument(
        "--agents",
        type=int,
        default=DEFAULT_AGENT_COUNT,
        help="Number of agents to spawn.",
    )
    parser.add_argument(
        "--level",
        type=int,
        default=0,
        help="Level index the agents are spawned on.",
    )
    parser.add_argument(
        "--profile",
        default=DEFAULT_PROFILE_ID,
        help="Profile id for the spawned agents.",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=None,
        help="Maximum number of ticks to run.",
    )
    parser.add_argument(
        "--tick-seconds",
        type=float,
        default=None,
        help="Simulated seconds per tick (default 0.05).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for agent placement.",
    )
    parser.add_argument(
        "--replay-dir",
        type=Path,
        default=DEFAULT_REPLAY_DIR,
        help="Base directory for run logs.",
    )
    parser.add_argument(
        "--replay",
        type=Path,
        default=None,
        help="Print a saved run folder instead of running a drill.",
    )
    parser.add_argument(
        "--stride",
        type=int,
        default=DEFAULT_STRIDE,
        help="Print every Nth tick when replaying.",
    )
    parser.add_argument(
        "--view",
        action="store_true",
        help="Follow a run log in the live viewer.",
    )
    parser.add_argument(
        "--run-folder",
        type=Path,
        default=None,
        help="Run folder to view (defaults to latest).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default WARNING, or EGRESS_LOG_LEVEL).",
    )
    args = parser.parse_args()

    console = Console()
    logging.basicConfig(
        level=resolve_log_level(args.log_level),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    if args.view:
        run_folder = args.run_folder or _latest_run_folder(args.replay_dir)
        if run_folder is None:
            raise SystemExit("No run folder found. Run a drill first.")
        tail_replay_log(run_folder / RUN_LOG_NAME)
        return

    if args.replay is not None:
        _replay_run(console, args.replay, stride=args.stride)
        return

    try:
        result = run_evacuation(
            args.building,
            args.replay_dir,
            agents=args.agents,
            level_index=args.level,
            profile_id=args.profile,
            profile_path=args.profiles,
            ticks=args.ticks,
            tick_seconds=args.tick_seconds,
            seed=args.seed,
        )
    except (FileNotFoundError, ValidationError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    console.print(render_stats(result.stats))
    console.print(f"Run saved to {result.run_dir} ({result.ticks} ticks)")


def _latest_run_folder(base_dir: Path) -> Path | None:
    if not base_dir.exists():
        return None
    run_dirs = [path for path in base_dir.iterdir() if path.is_dir()]
    if not run_dirs:
        return None
    return sorted(run_dirs)[-1]


def _replay_run(console: Console, run_folder: Path, *, stride: int) -> None:
    log_path = run_folder / RUN_LOG_NAME
    if not log_path.exists():
        raise SystemExit(f"No run log in {run_folder}.")
    metadata = read_header(log_path)
    if metadata:
        console.print(render_run_header(metadata))
    last = None
    for payload in read_tick_payloads(log_path):
        last = payload
        if payload.tick % max(1, stride) == 0:
            console.print(render_tick(payload))
    if last is None:
        return
    if last.tick % max(1, stride) != 0:
        console.print(render_tick(last))
    console.print(render_stats(last.stats))


if __name__ == "__main__":
    main()
