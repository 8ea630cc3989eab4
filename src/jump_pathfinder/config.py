"""Configuration system for the jump pathfinder.

PhysicsConfig defines the fixed-timestep constants shared by the stepper and
the pathfinder. Every call in one run must see the same values, so a run
builds its configs once and passes them down.

This design separates:
- Physics constants (how the agent moves) - PhysicsConfig
- Search tunables (how hard the planner looks) - PlannerConfig
- Course conventions (where the agent starts, where the goal is) - CourseConfig
"""

from dataclasses import dataclass, field
from typing import Tuple, Dict, Any, ClassVar, List

import numpy as np


@dataclass
class PhysicsConfig:
    """Fixed physics constants for the side-scroller.

    Values are stored as Python floats for readability and exposed as
    float32 views for the stepper, which works in single precision.
    """

    fps: int = 60
    forward_speed: float = 220.0  # Constant horizontal speed (px/s)
    gravity: float = -1600.0  # Vertical acceleration (px/s^2), negative = down
    jump_velocity: float = 680.0  # Vertical velocity set by a jump (px/s)

    # Landing tolerance for float drift on platform tops
    landing_epsilon: float = 1e-3

    # Death is signalled by collapsing py to the sentinel. The threshold must sit
    # strictly between the sentinel and any legal course geometry.
    death_sentinel: float = -999999.0
    death_threshold: float = -1000.0

    FPS_RANGE: ClassVar[Tuple[int, int]] = (30, 240)

    @property
    def dt(self) -> float:
        """Timestep in seconds."""
        return 1.0 / self.fps

    @property
    def jump_apex(self) -> float:
        """Apex height above the launch point of a full jump (px)."""
        return self.jump_velocity ** 2 / (2 * -self.gravity)

    @property
    def jump_airtime(self) -> float:
        """Seconds from launch back to launch height."""
        return 2 * self.jump_velocity / -self.gravity

    @property
    def jump_reach(self) -> float:
        """Horizontal distance covered during a full jump (px)."""
        return self.forward_speed * self.jump_airtime

    def as_float32(self) -> Dict[str, np.float32]:
        """Single-precision constants used by the stepper."""
        return {
            "dt": np.float32(self.dt),
            "forward_speed": np.float32(self.forward_speed),
            "gravity": np.float32(self.gravity),
            "jump_velocity": np.float32(self.jump_velocity),
            "landing_epsilon": np.float32(self.landing_epsilon),
            "death_sentinel": np.float32(self.death_sentinel),
            "death_threshold": np.float32(self.death_threshold),
        }

    def validate(self) -> List[str]:
        """Return a list of problems (empty if valid)."""
        problems = []
        if not (self.FPS_RANGE[0] <= self.fps <= self.FPS_RANGE[1]):
            problems.append(f"fps {self.fps} outside {self.FPS_RANGE}")
        if self.forward_speed <= 0:
            problems.append("forward_speed must be positive")
        if self.gravity >= 0:
            problems.append("gravity must be negative (pointing down)")
        if self.jump_velocity <= 0:
            problems.append("jump_velocity must be positive")
        if self.landing_epsilon < 0:
            problems.append("landing_epsilon must be non-negative")
        if not self.death_sentinel < self.death_threshold:
            problems.append("death_threshold must be above death_sentinel")
        return problems

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {
            "fps": self.fps,
            "forward_speed": self.forward_speed,
            "gravity": self.gravity,
            "jump_velocity": self.jump_velocity,
            "landing_epsilon": self.landing_epsilon,
            "death_sentinel": self.death_sentinel,
            "death_threshold": self.death_threshold,
        }

    def to_dict_with_derived(self) -> Dict[str, float]:
        """Convert to dictionary including derived values."""
        return {
            **self.to_dict(),
            "dt": self.dt,
            "jump_apex": self.jump_apex,
            "jump_airtime": self.jump_airtime,
            "jump_reach": self.jump_reach,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, float]) -> "PhysicsConfig":
        """Create from dictionary (ignores derived values)."""
        return cls(
            fps=int(d.get("fps", 60)),
            forward_speed=d.get("forward_speed", 220.0),
            gravity=d.get("gravity", -1600.0),
            jump_velocity=d.get("jump_velocity", 680.0),
            landing_epsilon=d.get("landing_epsilon", 1e-3),
            death_sentinel=d.get("death_sentinel", -999999.0),
            death_threshold=d.get("death_threshold", -1000.0),
        )


@dataclass
class PlannerConfig:
    """Search tunables. Independent of each other and of the decision logic."""

    lookahead_frames: int = 36  # Frames simulated without jumping to check safety
    max_jump_delay: int = 8  # Largest delayed-jump offset tried (inclusive)
    max_frames: int = 60 * 300  # Safety cap on real frames

    LOOKAHEAD_RANGE: ClassVar[Tuple[int, int]] = (1, 600)
    MAX_JUMP_DELAY_RANGE: ClassVar[Tuple[int, int]] = (0, 120)

    def validate(self) -> List[str]:
        """Return a list of problems (empty if valid)."""
        problems = []
        lo, hi = self.LOOKAHEAD_RANGE
        if not (lo <= self.lookahead_frames <= hi):
            problems.append(f"lookahead_frames {self.lookahead_frames} outside {self.LOOKAHEAD_RANGE}")
        lo, hi = self.MAX_JUMP_DELAY_RANGE
        if not (lo <= self.max_jump_delay <= hi):
            problems.append(f"max_jump_delay {self.max_jump_delay} outside {self.MAX_JUMP_DELAY_RANGE}")
        if self.max_frames <= 0:
            problems.append("max_frames must be positive")
        return problems

    def to_dict(self) -> Dict[str, int]:
        return {
            "lookahead_frames": self.lookahead_frames,
            "max_jump_delay": self.max_jump_delay,
            "max_frames": self.max_frames,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, int]) -> "PlannerConfig":
        return cls(
            lookahead_frames=int(d.get("lookahead_frames", 36)),
            max_jump_delay=int(d.get("max_jump_delay", 8)),
            max_frames=int(d.get("max_frames", 60 * 300)),
        )


@dataclass
class CourseConfig:
    """Conventions for deriving start and goal from an obstacle list."""

    start_before_x: float = 16.0  # Start this far left of the first obstacle
    start_height: float = 12.0  # Start this far above the highest platform top
    default_width: float = 1200.0  # Course width assumed without platforms
    floor_y: float = 0.0  # Implicit floor height for courses without platforms
    jump_pad_height: float = 16.0  # Pad records carry no height field

    def to_dict(self) -> Dict[str, float]:
        return {
            "start_before_x": self.start_before_x,
            "start_height": self.start_height,
            "default_width": self.default_width,
            "floor_y": self.floor_y,
            "jump_pad_height": self.jump_pad_height,
        }


@dataclass
class RunConfig:
    """Complete run configuration combining all parameter groups."""
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    planner: PlannerConfig = field(default_factory=PlannerConfig)
    course: CourseConfig = field(default_factory=CourseConfig)

    # Output artifact names (written under the run's output directory)
    macro_filename: str = "macro.txt"
    report_filename: str = "pathfinder_report.json"
    trajectory_filename: str = "trajectory.npz"
    plot_filename: str = "trajectory.png"

    def validate(self) -> None:
        """Raise ValueError if any parameter group is invalid."""
        problems = self.physics.validate() + self.planner.validate()
        if problems:
            raise ValueError(f"Invalid run config: {problems}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to nested dictionary."""
        return {
            "physics": self.physics.to_dict(),
            "planner": self.planner.to_dict(),
            "course": self.course.to_dict(),
        }


# Predefined configurations
CONFIGS = {
    "default": RunConfig(),

    # Looks further ahead and waits longer before giving up on a jump
    "patient": RunConfig(planner=PlannerConfig(lookahead_frames=60, max_jump_delay=20)),

    # Short horizon, no delayed jumps: reacts only to immediate danger
    "reactive": RunConfig(planner=PlannerConfig(lookahead_frames=12, max_jump_delay=0)),

    # Faster scroll with a stronger jump
    "fast": RunConfig(physics=PhysicsConfig(forward_speed=330.0, jump_velocity=760.0)),

    # Double-rate simulation
    "fine": RunConfig(
        physics=PhysicsConfig(fps=120),
        planner=PlannerConfig(lookahead_frames=72, max_jump_delay=16, max_frames=120 * 300),
    ),
}
