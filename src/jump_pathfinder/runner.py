"""Top-level run: load a course, derive start and goal, plan, write outputs.

Outputs (under out_dir, names from RunConfig):
- macro.txt: one jump frame per line, ascending (success only)
- pathfinder_report.json: start, goal, full obstacle dump, planner diagnostics
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from .config import CourseConfig, RunConfig
from .errors import PathfinderError
from .obstacles import Course, Obstacle
from .pathfinder import PlanResult, plan
from .physics import AgentState
from .sources import ObstacleSource, StaticSource

logger = logging.getLogger(__name__)


def _json_default(obj: Any) -> Any:
    """JSON serializer for numpy values in reports."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        return float(obj)
    if isinstance(obj, np.bool_):
        return bool(obj)
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def derive_goal_x(course: Course, course_config: Optional[CourseConfig] = None) -> float:
    """Far edge of the last solid ground.

    Without platforms, the far edge of any obstacle; for an empty course, a
    default width past x=0.
    """
    course_config = course_config or CourseConfig()
    extent = course.platform_extent()
    if extent is not None:
        return float(extent)
    if len(course):
        return float(max(o.right for o in course))
    return float(course_config.default_width)


def derive_start(course: Course, run_config: Optional[RunConfig] = None) -> AgentState:
    """On-ground start a little before the first obstacle, above the highest platform."""
    run_config = run_config or RunConfig()
    cc = run_config.course
    min_x = min((o.x for o in course), default=0.0)
    ground_y = course.ground_y()
    if ground_y is None:
        ground_y = cc.floor_y
    return AgentState.create(
        px=min_x - cc.start_before_x,
        py=ground_y + cc.start_height,
        vx=run_config.physics.forward_speed,
        vy=0.0,
        on_ground=True,
    )


@dataclass
class RunResult:
    """A successful run."""
    schedule: Tuple[int, ...]
    goal_x: float
    start: AgentState
    course: Course
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    @property
    def jumps_count(self) -> int:
        return len(self.schedule)


def build_report(
    course: Course,
    start: AgentState,
    goal_x: float,
    result: Optional[PlanResult],
    error: Optional[PathfinderError] = None,
) -> Dict[str, Any]:
    """Diagnostic record for post-mortem inspection."""
    report = {
        "success": bool(result is not None and result.success),
        "start": start.to_dict(),
        "goal_x": float(goal_x),
        "objects": course.dump(),
        "plan": dict(result.diagnostics) if result is not None else {},
        "jumps_count": len(result.jumps) if result is not None else 0,
    }
    if error is not None:
        report["error"] = error.to_dict()
    return report


def write_report(path: Union[str, Path], report: Dict[str, Any]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(report, f, indent=2, default=_json_default)
    return path


def write_schedule(path: Union[str, Path], schedule: Sequence[int]) -> Path:
    """Write one frame index per line."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        for frame in schedule:
            f.write(f"{int(frame)}\n")
    return path


def read_schedule(path: Union[str, Path]) -> Tuple[int, ...]:
    """Read a schedule written by write_schedule()."""
    with open(path) as f:
        return tuple(int(line) for line in f if line.strip())


def run(
    source: Union[ObstacleSource, Sequence[Obstacle]],
    goal_x: Optional[float] = None,
    config: Optional[RunConfig] = None,
    out_dir: Optional[Union[str, Path]] = None,
    should_stop: Optional[Callable[[], bool]] = None,
    progress: Optional[Callable[[float], None]] = None,
) -> RunResult:
    """Plan a course end to end.

    Args:
        source: An ObstacleSource, or a plain obstacle list.
        goal_x: Goal X. Derived from the course when None.
        config: Run configuration. Uses defaults if None.
        out_dir: If given, macro and report files are written there.
        should_stop: Polled between real frames to cancel.
        progress: Percent-complete callback.

    Returns:
        RunResult on success.

    Raises:
        SourceUnavailable, MalformedSource: the course could not be loaded.
        Unsolvable, FrameCapExceeded, Cancelled: no schedule was found. The
            error's diagnostics hold the full report.
    """
    config = config or RunConfig()
    config.validate()
    if not isinstance(source, ObstacleSource):
        source = StaticSource(source)
    out_dir = Path(out_dir) if out_dir is not None else None

    try:
        obstacles = source.load()
    except PathfinderError as exc:
        logger.error("Failed to load obstacles from %s: %s", source.name, exc)
        if out_dir is not None:
            write_report(out_dir / config.report_filename,
                         {"success": False, "source": source.name,
                          "error": exc.to_dict(), "diagnostics": exc.diagnostics})
        raise

    course = Course(obstacles, floor_y=config.course.floor_y)
    if goal_x is None:
        goal_x = derive_goal_x(course, config.course)
    start = derive_start(course, config)

    logger.info("Planning %d obstacles, start x=%.1f, goal x=%.1f", len(course), start.px, goal_x)
    result = plan(course, start, goal_x, config.physics, config.planner,
                  should_stop=should_stop, progress=progress)

    error = result.to_error()
    report = build_report(course, start, goal_x, result, error)
    if out_dir is not None:
        write_report(out_dir / config.report_filename, report)

    if error is not None:
        logger.error("Pathfinder failed: %s", error)
        error.diagnostics = report
        raise error

    if out_dir is not None:
        macro_path = write_schedule(out_dir / config.macro_filename, result.jumps)
        logger.info("Wrote %d jumps to %s", len(result.jumps), macro_path)

    return RunResult(
        schedule=result.jumps,
        goal_x=goal_x,
        start=start,
        course=course,
        diagnostics=report,
    )
