"""Replay a jump schedule through the stepper and record the trajectory.

Used to check a committed schedule (does it actually reach the goal alive?)
and to keep per-frame data for plotting. Saved as compressed .npz:

    traj = replay_schedule(course, start, jumps, goal_x=goal_x)
    traj.save("out/trajectory.npz")
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import numpy as np

from .config import PhysicsConfig
from .obstacles import as_course
from .physics import AgentState, is_dead, step


@dataclass
class Trajectory:
    """Per-frame arrays. Index 0 is the start state; `jumped[i]` is the input
    applied on the step that produced state i (False for the start)."""
    px: np.ndarray
    py: np.ndarray
    vx: np.ndarray
    vy: np.ndarray
    on_ground: np.ndarray
    jumped: np.ndarray
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.px)

    @property
    def frames(self) -> int:
        """Number of steps taken."""
        return len(self.px) - 1

    def died(self, config: Optional[PhysicsConfig] = None) -> bool:
        config = config or PhysicsConfig()
        return bool((self.py < np.float32(config.death_threshold)).any())

    def reached_goal(self, goal_x: float) -> bool:
        return bool(len(self.px) and self.px[-1] >= goal_x)

    def state_at(self, i: int) -> AgentState:
        return AgentState(self.px[i], self.py[i], self.vx[i], self.vy[i], bool(self.on_ground[i]))

    def save(self, path: Union[str, Path], compress: bool = True) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "px": self.px,
            "py": self.py,
            "vx": self.vx,
            "vy": self.vy,
            "on_ground": self.on_ground,
            "jumped": self.jumped,
        }
        if self.metadata:
            data["metadata_json"] = np.array(json.dumps(self.metadata))
        if compress:
            np.savez_compressed(path, **data)
        else:
            np.savez(path, **data)
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Trajectory":
        with np.load(path) as data:
            metadata = {}
            if "metadata_json" in data:
                metadata = json.loads(str(data["metadata_json"]))
            return cls(
                px=data["px"],
                py=data["py"],
                vx=data["vx"],
                vy=data["vy"],
                on_ground=data["on_ground"],
                jumped=data["jumped"],
                metadata=metadata,
            )


def replay_schedule(
    obstacles,
    start: AgentState,
    jumps: Iterable[int],
    goal_x: Optional[float] = None,
    max_frames: int = 60 * 300,
    physics: Optional[PhysicsConfig] = None,
) -> Trajectory:
    """Step from `start`, asserting jump on each scheduled frame.

    Stops once px >= goal_x (when given), when the agent dies, or after
    max_frames steps.
    """
    course = as_course(obstacles)
    jump_frames = set(int(j) for j in jumps)

    states = [start]
    jumped = [False]
    state = start
    for frame in range(max_frames):
        if goal_x is not None and state.px >= goal_x:
            break
        want = frame in jump_frames
        state = step(state, want, course, physics)
        states.append(state)
        jumped.append(want)
        if is_dead(state, physics):
            break

    return Trajectory(
        px=np.array([s.px for s in states], dtype=np.float32),
        py=np.array([s.py for s in states], dtype=np.float32),
        vx=np.array([s.vx for s in states], dtype=np.float32),
        vy=np.array([s.vy for s in states], dtype=np.float32),
        on_ground=np.array([s.on_ground for s in states], dtype=np.bool_),
        jumped=np.array(jumped, dtype=np.bool_),
        metadata={
            "jumps": sorted(jump_frames),
            "goal_x": goal_x,
            "start": start.to_dict(),
        },
    )
