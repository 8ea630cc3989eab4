"""Greedy jump scheduling with a safety lookahead and bounded delay search.

Each real frame the planner asks one question: does the agent survive the
lookahead horizon if it never jumps? If not, it tries a jump now, then jumps
after 1..max_jump_delay idle frames, and commits the first option whose own
lookahead survives. There is no backtracking past the current frame.

Usage:
    result = plan(obstacles, start, goal_x=1000.0)
    if result.success:
        print(result.jumps)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from .config import PhysicsConfig, PlannerConfig
from .errors import Cancelled, FrameCapExceeded, PathfinderError, Unsolvable
from .obstacles import Course, as_course
from .physics import AgentState, is_dead, step

logger = logging.getLogger(__name__)

FAILED_MAX_FRAMES = "max_frames_exceeded"
FAILED_CANCELLED = "cancelled"


@dataclass
class PlanResult:
    """Outcome of one planning run. `jumps` is empty whenever success is False."""
    success: bool
    jumps: Tuple[int, ...] = ()
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    @property
    def failed_frame(self) -> Optional[int]:
        return self.diagnostics.get("failed_frame")

    @property
    def failed_reason(self) -> Optional[str]:
        return self.diagnostics.get("failed_reason")

    def to_error(self) -> Optional[PathfinderError]:
        """Typed error matching this failure, or None on success."""
        if self.success:
            return None
        if self.failed_reason == FAILED_CANCELLED:
            return Cancelled(self.diagnostics.get("frames", 0), self.diagnostics)
        if self.failed_reason == FAILED_MAX_FRAMES:
            return FrameCapExceeded(self.diagnostics.get("max_frames", 0), self.diagnostics)
        return Unsolvable(self.failed_frame, self.diagnostics)

    def raise_for_failure(self) -> None:
        error = self.to_error()
        if error is not None:
            raise error


def survives(state: AgentState, course: Course, frames: int,
             physics: Optional[PhysicsConfig] = None) -> bool:
    """Simulate `frames` no-jump steps on a copy; True if the agent never dies."""
    probe = state
    for _ in range(frames):
        probe = step(probe, False, course, physics)
        if is_dead(probe, physics):
            return False
    return True


def find_jump(state: AgentState, course: Course, physics: Optional[PhysicsConfig] = None,
              planner: Optional[PlannerConfig] = None) -> Optional[int]:
    """Smallest delay (0 = now) after which a jump leads to a safe lookahead.

    Returns None when no delay up to planner.max_jump_delay works. The state
    passed in is never modified.
    """
    planner = planner or PlannerConfig()
    horizon = planner.lookahead_frames

    if state.on_ground:
        after = step(state, True, course, physics)
        if survives(after, course, horizon, physics):
            return 0

    for delay in range(1, planner.max_jump_delay + 1):
        trial = state
        for _ in range(delay):
            trial = step(trial, False, course, physics)
        if not trial.on_ground:
            continue
        after = step(trial, True, course, physics)
        if survives(after, course, horizon, physics):
            return delay
    return None


def plan(
    obstacles,
    start: AgentState,
    goal_x: float,
    physics: Optional[PhysicsConfig] = None,
    planner: Optional[PlannerConfig] = None,
    should_stop: Optional[Callable[[], bool]] = None,
    progress: Optional[Callable[[float], None]] = None,
) -> PlanResult:
    """Compute a jump schedule carrying `start` past `goal_x`.

    Args:
        obstacles: A Course, or any iterable of obstacles.
        start: Seed state. Never modified.
        goal_x: Success once px >= goal_x at the top of a frame.
        physics: Physics constants. Uses defaults if None.
        planner: Search tunables. Uses defaults if None.
        should_stop: Polled once per real frame; True cancels the run.
        progress: Called once per real frame with percent of goal_x reached.

    Returns:
        PlanResult with the committed schedule, or failure diagnostics.
    """
    course = as_course(obstacles)
    physics = physics or PhysicsConfig()
    planner = planner or PlannerConfig()

    diagnostics: Dict[str, Any] = {"goal_x": float(goal_x), "obj_count": len(course)}
    jumps = []
    state = start
    frame = 0

    logger.debug("Planning to x=%.1f over %d obstacles", goal_x, len(course))

    while frame < planner.max_frames:
        if should_stop is not None and should_stop():
            logger.info("Planning cancelled at frame %d", frame)
            diagnostics["failed_reason"] = FAILED_CANCELLED
            diagnostics["frames"] = frame
            return PlanResult(False, (), diagnostics)

        if state.px >= goal_x:
            diagnostics["frames"] = frame
            logger.debug("Goal reached at frame %d with %d jumps", frame, len(jumps))
            return PlanResult(True, tuple(jumps), diagnostics)

        if progress is not None and goal_x > 0:
            progress(min(float(state.px) / goal_x * 100.0, 100.0))

        if survives(state, course, planner.lookahead_frames, physics):
            state = step(state, False, course, physics)
            frame += 1
            continue

        delay = find_jump(state, course, physics, planner)
        if delay is None:
            logger.debug("No safe jump at frame %d (px=%.1f)", frame, state.px)
            diagnostics["failed_frame"] = frame
            return PlanResult(False, (), diagnostics)

        jumps.append(frame + delay)
        for _ in range(delay):
            state = step(state, False, course, physics)
        state = step(state, True, course, physics)
        frame += delay + 1

    diagnostics["failed_reason"] = FAILED_MAX_FRAMES
    diagnostics["max_frames"] = planner.max_frames
    return PlanResult(False, (), diagnostics)
