"""Course obstacles: platforms, spikes, jump pads.

Each obstacle is an immutable axis-aligned rectangle with origin at its
bottom-left corner. A Course partitions an obstacle list by kind once so the
stepper can test a whole kind per step with numpy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pymunk


class ObstacleKind(Enum):
    """Closed set of obstacle kinds."""
    PLATFORM = "platform"  # Solid top edge the agent can land on
    SPIKE = "spike"        # Lethal region
    JUMP_PAD = "jump_pad"  # Overrides vertical velocity on contact


@dataclass(frozen=True)
class Obstacle:
    """Typed rectangle. `power` only matters for jump pads (<= 0 means unset)."""
    kind: ObstacleKind
    x: float
    y: float
    w: float
    h: float
    power: float = 0.0

    @classmethod
    def platform(cls, x: float, y: float, w: float, h: float) -> "Obstacle":
        return cls(ObstacleKind.PLATFORM, x, y, w, h)

    @classmethod
    def spike(cls, x: float, y: float, w: float, h: float) -> "Obstacle":
        return cls(ObstacleKind.SPIKE, x, y, w, h)

    @classmethod
    def jump_pad(cls, x: float, y: float, w: float, h: float = 16.0, power: float = 0.0) -> "Obstacle":
        return cls(ObstacleKind.JUMP_PAD, x, y, w, h, power)

    @property
    def top(self) -> float:
        return self.y + self.h

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Get (left, bottom, right, top) bounds."""
        return (self.x, self.y, self.x + self.w, self.y + self.h)

    @property
    def bb(self) -> pymunk.BB:
        """Bounding box in pymunk form."""
        return pymunk.BB(*self.bounds)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dict (power only for pads)."""
        d = {"type": self.kind.value, "x": self.x, "y": self.y, "w": self.w, "h": self.h}
        if self.kind == ObstacleKind.JUMP_PAD:
            d["power"] = self.power
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Obstacle":
        """Create from dict produced by to_dict()."""
        return cls(
            kind=ObstacleKind(d["type"]),
            x=float(d["x"]),
            y=float(d["y"]),
            w=float(d["w"]),
            h=float(d["h"]),
            power=float(d.get("power", 0.0)),
        )


def _edges(obstacles: Sequence[Obstacle]) -> Dict[str, np.ndarray]:
    """Float32 edge arrays for a group of obstacles (edges summed in float32)."""
    x = np.array([o.x for o in obstacles], dtype=np.float32)
    y = np.array([o.y for o in obstacles], dtype=np.float32)
    w = np.array([o.w for o in obstacles], dtype=np.float32)
    h = np.array([o.h for o in obstacles], dtype=np.float32)
    return {"left": x, "bottom": y, "right": x + w, "top": y + h}


class Course:
    """Read-only obstacle set prepared for stepping.

    Kinds keep their original relative order, so "last pad wins" follows the
    order of the source. A course with no platforms at all gets an implicit,
    unbounded floor at `floor_y`.
    """

    def __init__(self, obstacles: Iterable[Obstacle], floor_y: Optional[float] = 0.0):
        self.obstacles: Tuple[Obstacle, ...] = tuple(obstacles)
        self.platforms = tuple(o for o in self.obstacles if o.kind == ObstacleKind.PLATFORM)
        self.spikes = tuple(o for o in self.obstacles if o.kind == ObstacleKind.SPIKE)
        self.jump_pads = tuple(o for o in self.obstacles if o.kind == ObstacleKind.JUMP_PAD)

        self.floor_y: Optional[np.float32] = None
        if not self.platforms and floor_y is not None:
            self.floor_y = np.float32(floor_y)

        self.platform_edges = _edges(self.platforms)
        self.spike_edges = _edges(self.spikes)
        self.pad_edges = _edges(self.jump_pads)
        self.pad_power = np.array([o.power for o in self.jump_pads], dtype=np.float32)

    def __len__(self) -> int:
        return len(self.obstacles)

    def __iter__(self):
        return iter(self.obstacles)

    @property
    def has_implicit_floor(self) -> bool:
        return self.floor_y is not None

    @property
    def bb(self) -> Optional[pymunk.BB]:
        """Merged bounding box of every obstacle, or None for an empty course."""
        if not self.obstacles:
            return None
        box = self.obstacles[0].bb
        for o in self.obstacles[1:]:
            box = box.merge(o.bb)
        return box

    def ground_y(self) -> Optional[float]:
        """Highest platform top, or None without platforms."""
        if not self.platforms:
            return None
        return max(o.top for o in self.platforms)

    def platform_extent(self) -> Optional[float]:
        """Far edge of the last solid ground: max(x + w) over platforms."""
        if not self.platforms:
            return None
        return max(o.right for o in self.platforms)

    def dump(self) -> List[Dict[str, Any]]:
        """Full obstacle dump for reports."""
        return [o.to_dict() for o in self.obstacles]


def as_course(obstacles, floor_y: Optional[float] = 0.0) -> Course:
    """Accept a Course or any iterable of obstacles."""
    if isinstance(obstacles, Course):
        return obstacles
    return Course(obstacles, floor_y=floor_y)
