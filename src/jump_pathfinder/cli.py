"""CLI entrypoint: plan a level file and write the macro and report.

    jump-pathfinder level.txt --out-dir out/ --trajectory --plot

Each positional LEVEL is one discovery strategy, tried in order until one
produces obstacles.
"""

import argparse
import copy
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import CONFIGS, RunConfig
from .errors import PathfinderError
from .replay import replay_schedule
from .runner import run
from .sources import ChainedSource, LevelFileSource, ObstacleSource, ReportSource


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Compute a jump schedule that carries the runner across a course",
    )
    parser.add_argument(
        "levels",
        nargs="+",
        type=Path,
        metavar="LEVEL",
        help="Level text file(s) or saved reports, tried in order",
    )
    parser.add_argument("--goal-x", type=float, default=None,
                        help="Goal X (default: far edge of the last platform)")
    parser.add_argument("--out-dir", type=Path, default=Path("."))
    parser.add_argument("--preset", choices=sorted(CONFIGS), default="default")
    parser.add_argument("--lookahead", type=int, default=None, help="Lookahead horizon in frames")
    parser.add_argument("--max-delay", type=int, default=None, help="Largest delayed-jump offset")
    parser.add_argument("--max-frames", type=int, default=None, help="Frame safety cap")
    parser.add_argument(
        "--trajectory",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Replay the schedule and save trajectory.npz",
    )
    parser.add_argument(
        "--plot",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Save a PNG of the course and the replayed path",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def _make_source(path: Path) -> ObstacleSource:
    if path.suffix.lower() == ".json":
        return ReportSource(path)
    return LevelFileSource(path)


def _make_config(args: argparse.Namespace) -> RunConfig:
    config = copy.deepcopy(CONFIGS[args.preset])
    if args.lookahead is not None:
        config.planner.lookahead_frames = args.lookahead
    if args.max_delay is not None:
        config.planner.max_jump_delay = args.max_delay
    if args.max_frames is not None:
        config.planner.max_frames = args.max_frames
    return config


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = _make_config(args)
    try:
        config.validate()
    except ValueError as exc:
        parser.error(str(exc))

    source = ChainedSource([_make_source(p) for p in args.levels])

    try:
        result = run(source, goal_x=args.goal_x, config=config, out_dir=args.out_dir)
    except PathfinderError as exc:
        print(f"Pathfinder failed: {exc}", file=sys.stderr)
        print(f"  Report: {args.out_dir / config.report_filename}", file=sys.stderr)
        return 1

    print(f"Found {result.jumps_count} jumps to reach x={result.goal_x:.1f}")
    print(f"  Macro: {args.out_dir / config.macro_filename}")
    print(f"  Report: {args.out_dir / config.report_filename}")

    if args.trajectory or args.plot:
        traj = replay_schedule(
            result.course, result.start, result.schedule,
            goal_x=result.goal_x,
            max_frames=config.planner.max_frames,
            physics=config.physics,
        )
        if args.trajectory:
            path = traj.save(args.out_dir / config.trajectory_filename)
            print(f"  Trajectory: {path}")
        if args.plot:
            from .analysis.trajectory_plot import plot_course
            path = plot_course(result.course, args.out_dir / config.plot_filename,
                               trajectory=traj, goal_x=result.goal_x,
                               death_threshold=config.physics.death_threshold)
            print(f"  Plot: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
