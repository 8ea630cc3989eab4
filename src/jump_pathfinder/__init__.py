"""jump-pathfinder: offline jump scheduling for an auto-scrolling 2D runner.

A deterministic fixed-timestep stepper moves the agent right at constant speed
over typed obstacles (platforms, spikes, jump pads). A greedy planner with a
safety lookahead and bounded delayed-jump search turns a course into the list
of frames on which jump must be pressed.
"""

from .config import PhysicsConfig, PlannerConfig, CourseConfig, RunConfig, CONFIGS
from .errors import (
    PathfinderError, SourceUnavailable, MalformedSource, Unsolvable, FrameCapExceeded, Cancelled,
)
from .obstacles import Obstacle, ObstacleKind, Course
from .physics import AgentState, step, is_dead
from .pathfinder import plan, PlanResult
from .level_format import parse_level, read_level, format_level, write_level
from .sources import ObstacleSource, StaticSource, LevelFileSource, ReportSource, CallableSource, ChainedSource
from .runner import run, RunResult
from .replay import replay_schedule, Trajectory

__all__ = [
    "PhysicsConfig",
    "PlannerConfig",
    "CourseConfig",
    "RunConfig",
    "CONFIGS",
    "PathfinderError",
    "SourceUnavailable",
    "MalformedSource",
    "Unsolvable",
    "FrameCapExceeded",
    "Cancelled",
    "Obstacle",
    "ObstacleKind",
    "Course",
    "AgentState",
    "step",
    "is_dead",
    "plan",
    "PlanResult",
    "parse_level",
    "read_level",
    "format_level",
    "write_level",
    "ObstacleSource",
    "StaticSource",
    "LevelFileSource",
    "ReportSource",
    "CallableSource",
    "ChainedSource",
    "run",
    "RunResult",
    "replay_schedule",
    "Trajectory",
]
