"""Deterministic fixed-timestep physics for the auto-scrolling runner.

The agent moves right at constant speed; the only input is "jump". All
quantities are single precision. A dead agent is not an error: its py is
collapsed to a sentinel far below any legal geometry.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import numpy as np

from .config import PhysicsConfig
from .obstacles import Course, as_course


_DEFAULT_PHYSICS = PhysicsConfig()


@dataclass(frozen=True)
class AgentState:
    """Complete simulation state. A value: copies never alias."""
    px: np.float32
    py: np.float32
    vx: np.float32
    vy: np.float32
    on_ground: bool = False

    @classmethod
    def create(cls, px: float, py: float, vx: float = 0.0, vy: float = 0.0,
               on_ground: bool = False) -> "AgentState":
        """Build a state, coercing every number to float32."""
        return cls(np.float32(px), np.float32(py), np.float32(vx), np.float32(vy), bool(on_ground))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "px": float(self.px),
            "py": float(self.py),
            "vx": float(self.vx),
            "vy": float(self.vy),
            "onGround": self.on_ground,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AgentState":
        return cls.create(d["px"], d["py"], d.get("vx", 0.0), d.get("vy", 0.0), d.get("onGround", False))


def is_dead(state: AgentState, config: Optional[PhysicsConfig] = None) -> bool:
    """Strict less-than against the derived threshold, never the sentinel itself."""
    config = config or _DEFAULT_PHYSICS
    return bool(state.py < np.float32(config.death_threshold))


def _landing_top(course: Course, prev_py: np.float32, px: np.float32, py: np.float32,
                 eps: np.float32) -> Optional[np.float32]:
    """Highest surface crossed downward this step, or None."""
    best = None
    edges = course.platform_edges
    if edges["top"].size:
        top = edges["top"]
        crossed = ((edges["left"] <= px) & (px <= edges["right"])
                   & (prev_py >= top - eps) & (py <= top + eps))
        if crossed.any():
            best = top[crossed].max()

    if course.floor_y is not None:
        floor = course.floor_y
        if prev_py >= floor - eps and py <= floor + eps:
            if best is None or floor > best:
                best = floor
    return best


def _inside(edges: Dict[str, np.ndarray], px: np.float32, py: np.float32) -> np.ndarray:
    """Mask of rectangles containing the point (closed intervals, no tolerance)."""
    return ((edges["left"] <= px) & (px <= edges["right"])
            & (edges["bottom"] <= py) & (py <= edges["top"]))


def step(state: AgentState, jump_requested: bool, course, config: Optional[PhysicsConfig] = None) -> AgentState:
    """Advance one state by one timestep.

    Args:
        state: State before the step (not modified).
        jump_requested: Jump input for this frame. Ignored while airborne.
        course: A Course, or any iterable of obstacles.
        config: Physics constants. Uses defaults if None.

    Returns:
        The new state.
    """
    config = config or _DEFAULT_PHYSICS
    course = as_course(course)
    c = config.as_float32()

    vy = state.vy
    on_ground = state.on_ground

    # 1. Jump only from the ground
    if jump_requested and on_ground:
        vy = c["jump_velocity"]
        on_ground = False

    # 2. Integrate
    px = np.float32(state.px + c["forward_speed"] * c["dt"])
    vy = np.float32(vy + c["gravity"] * c["dt"])
    py = np.float32(state.py + vy * c["dt"])

    # 3. Landing must be re-detected every step
    top = _landing_top(course, state.py, px, py, c["landing_epsilon"])
    if top is not None:
        py = np.float32(top)
        vy = np.float32(0.0)
        on_ground = True
    else:
        on_ground = False

    # 4. Jump pads: last overlapping pad in source order wins
    if course.pad_power.size:
        hits = np.flatnonzero(_inside(course.pad_edges, px, py))
        if hits.size:
            power = course.pad_power[hits[-1]]
            vy = power if power > 0 else c["jump_velocity"]
            on_ground = False

    # 5. Spikes
    if course.spike_edges["top"].size and _inside(course.spike_edges, px, py).any():
        py = c["death_sentinel"]

    return replace(state, px=px, py=py, vy=np.float32(vy), on_ground=on_ground)
