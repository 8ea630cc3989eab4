"""Post-mortem plots: obstacle dump plus the replayed trajectory.

Usage:
    from jump_pathfinder.analysis.trajectory_plot import plot_course

    plot_course(course, "out/trajectory.png", trajectory=traj, goal_x=goal_x)
"""

import matplotlib
matplotlib.use("Agg")  # headless rendering
import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pymunk

from ..obstacles import Course, ObstacleKind
from ..replay import Trajectory


_KIND_STYLE = {
    ObstacleKind.PLATFORM: {"color": "#98c379", "label": "platform"},
    ObstacleKind.SPIKE: {"color": "#e06c75", "label": "spike"},
    ObstacleKind.JUMP_PAD: {"color": "#ffc864", "label": "jump pad"},
}


def _save_fig(fig, path):
    """Save figure and close it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=150, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    return str(path)


def view_bounds(
    course: Course,
    trajectory: Optional[Trajectory] = None,
    goal_x: Optional[float] = None,
    death_threshold: float = -1000.0,
    margin: float = 20.0,
) -> Optional[pymunk.BB]:
    """Box holding every obstacle, the live part of the path and the goal line.

    None when there is nothing to frame.
    """
    box = course.bb
    if trajectory is not None and len(trajectory):
        alive = trajectory.py >= np.float32(death_threshold)
        if alive.any():
            px, py = trajectory.px[alive], trajectory.py[alive]
            path_box = pymunk.BB(float(px.min()), float(py.min()), float(px.max()), float(py.max()))
            box = path_box if box is None else box.merge(path_box)
    if goal_x is not None and box is not None:
        box = box.expand((float(goal_x), box.bottom))
    if box is None:
        return None
    return pymunk.BB(box.left - margin, box.bottom - margin, box.right + margin, box.top + margin)


def plot_course(
    course: Course,
    output_path: Union[str, Path],
    trajectory: Optional[Trajectory] = None,
    goal_x: Optional[float] = None,
    death_threshold: float = -1000.0,
) -> str:
    """Draw obstacles, goal line and (optionally) the agent's path.

    Jump frames are marked on the path. Frames after death are dropped so the
    sentinel does not flatten the y axis.
    """
    fig, ax = plt.subplots(figsize=(14, 4))

    labelled = set()
    for obstacle in course:
        style = _KIND_STYLE[obstacle.kind]
        label = style["label"] if obstacle.kind not in labelled else None
        labelled.add(obstacle.kind)
        ax.add_patch(Rectangle(
            (obstacle.x, obstacle.y), obstacle.w, obstacle.h,
            facecolor=style["color"], edgecolor="black", linewidth=0.5, label=label,
        ))

    if course.has_implicit_floor:
        ax.axhline(float(course.floor_y), color="#98c379", linestyle=":", label="implicit floor")

    if goal_x is not None:
        ax.axvline(goal_x, color="#e5c07b", linestyle="--", label="goal")

    if trajectory is not None and len(trajectory):
        alive = trajectory.py >= np.float32(death_threshold)
        ax.plot(trajectory.px[alive], trajectory.py[alive], color="#61afef", linewidth=1.2, label="agent")
        jumps = trajectory.jumped & alive
        if jumps.any():
            ax.scatter(trajectory.px[jumps], trajectory.py[jumps], marker="^", color="#c678dd",
                       zorder=3, label="jump")
        if alive.any() and not alive.all():
            last = np.flatnonzero(alive)[-1]
            ax.scatter([trajectory.px[last]], [trajectory.py[last]], marker="x", color="red",
                       s=80, zorder=3, label="death")

    box = view_bounds(course, trajectory, goal_x, death_threshold)
    if box is not None:
        ax.set_xlim(box.left, box.right)
        ax.set_ylim(box.bottom, box.top)
    else:
        ax.autoscale_view()
    ax.set_xlabel("x (px)")
    ax.set_ylabel("y (px)")
    ax.set_aspect("equal", adjustable="datalim")
    ax.legend(loc="upper right", fontsize=8)
    ax.set_title(f"{len(course)} obstacles")

    return _save_fig(fig, output_path)
