"""Gymnasium environment wrapper for a course.

Exposes the same deterministic stepper the planner uses, so a schedule from
plan() replays step for step through env.step().
"""

import numpy as np
import gymnasium
from gymnasium import spaces
from typing import Optional, Dict, Any, Tuple

import pygame

from .config import RunConfig
from .obstacles import Course, ObstacleKind
from .physics import AgentState, is_dead, step
from .runner import derive_goal_x, derive_start


_COLOR_BG = (40, 44, 52)
_COLOR_PLAYER = (97, 175, 239)
_COLOR_PLATFORM = (152, 195, 121)
_COLOR_SPIKE = (224, 108, 117)
_COLOR_JUMP_PAD = (255, 200, 100)
_COLOR_GOAL = (229, 192, 123)

_KIND_COLORS = {
    ObstacleKind.PLATFORM: _COLOR_PLATFORM,
    ObstacleKind.SPIKE: _COLOR_SPIKE,
    ObstacleKind.JUMP_PAD: _COLOR_JUMP_PAD,
}

_PLAYER_SIZE = 12


class RunnerEnv(gymnasium.Env):
    """Gymnasium wrapper for the auto-scrolling runner.

    Observation space:
        float32 Box of shape (5,): [px, py, vx, vy, on_ground]

    Action space:
        Discrete(2): 0 = no input, 1 = jump

    Reward = weighted sum of raw signals (stored in info['reward_signals']):
        goal:     1.0 when px reaches goal_x
        progress: delta_x this step
        death:    1.0 when the agent dies
        step:     1.0 every step
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 60}

    def __init__(
        self,
        course: Course,
        goal_x: Optional[float] = None,
        config: Optional[RunConfig] = None,
        render_mode: Optional[str] = None,
        screen_size: Tuple[int, int] = (800, 300),
        max_episode_steps: int = 3000,
        reward_weights: Optional[Dict[str, float]] = None,
    ):
        super().__init__()

        self.course = course
        self.config = config or RunConfig()
        self.goal_x = goal_x if goal_x is not None else derive_goal_x(course, self.config.course)
        self.render_mode = render_mode
        self.screen_width, self.screen_height = screen_size
        self.max_episode_steps = max_episode_steps

        self.reward_weights = reward_weights or {
            "goal": 100.0,
            "progress": 0.1,
            "death": -50.0,
            "step": -0.01,
        }

        self.action_space = spaces.Discrete(2)
        self.observation_space = spaces.Box(
            low=-np.inf, high=np.inf, shape=(5,), dtype=np.float32,
        )

        self._surface = None
        self._state: Optional[AgentState] = None
        self._episode_steps = 0
        self._reached_goal = False
        self._dead = False

    def reset(self, *, seed=None, options=None):
        super().reset(seed=seed)
        self._state = derive_start(self.course, self.config)
        self._episode_steps = 0
        self._reached_goal = False
        self._dead = False
        return self._get_obs(), self._get_info()

    def step(self, action):
        assert self._state is not None, "Must call reset() before step()"

        if isinstance(action, np.ndarray):
            action = int(action.item())
        prev_x = float(self._state.px)

        self._state = step(self._state, bool(action), self.course, self.config.physics)
        self._episode_steps += 1
        self._dead = is_dead(self._state, self.config.physics)
        self._reached_goal = bool(not self._dead and self._state.px >= self.goal_x)

        reward_signals = {
            "goal": 1.0 if self._reached_goal else 0.0,
            "progress": float(self._state.px) - prev_x,
            "death": 1.0 if self._dead else 0.0,
            "step": 1.0,
        }
        reward = sum(
            self.reward_weights.get(k, 0.0) * v
            for k, v in reward_signals.items()
        )

        terminated = self._reached_goal or self._dead
        truncated = self._episode_steps >= self.max_episode_steps

        info = self._get_info()
        info["reward_signals"] = reward_signals
        return self._get_obs(), float(reward), terminated, truncated, info

    def _get_obs(self):
        s = self._state
        return np.array([s.px, s.py, s.vx, s.vy, float(s.on_ground)], dtype=np.float32)

    def _get_info(self):
        return {
            "episode_steps": self._episode_steps,
            "reached_goal": self._reached_goal,
            "dead": self._dead,
            "goal_x": self.goal_x,
            "position": (float(self._state.px), float(self._state.py)),
        }

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _camera_x(self):
        return float(self._state.px) - self.screen_width * 0.3

    def _world_to_screen(self, x, y):
        screen_x = int(x - self._camera_x())
        screen_y = int(self.screen_height * 0.8 - y)
        return screen_x, screen_y

    def _render_frame(self):
        """Render current state to numpy array (H, W, 3) uint8."""
        if self._surface is None:
            if not pygame.get_init():
                pygame.init()
            self._surface = pygame.Surface((self.screen_width, self.screen_height))

        self._surface.fill(_COLOR_BG)

        for obstacle in self.course:
            left, bottom, right, top = obstacle.bounds
            sx, sy = self._world_to_screen(left, top)
            w, h = max(int(right - left), 1), max(int(top - bottom), 1)
            pygame.draw.rect(self._surface, _KIND_COLORS[obstacle.kind], (sx, sy, w, h))

        gx, _ = self._world_to_screen(self.goal_x, 0)
        pygame.draw.line(self._surface, _COLOR_GOAL, (gx, 0), (gx, self.screen_height), 2)

        if not self._dead:
            sx, sy = self._world_to_screen(float(self._state.px), float(self._state.py))
            pygame.draw.rect(
                self._surface, _COLOR_PLAYER,
                (sx - _PLAYER_SIZE // 2, sy - _PLAYER_SIZE, _PLAYER_SIZE, _PLAYER_SIZE),
            )

        # surfarray gives (W, H, 3); transpose to (H, W, 3)
        array = pygame.surfarray.array3d(self._surface)
        return np.transpose(array, (1, 0, 2)).astype(np.uint8)

    def render(self):
        if self.render_mode == "rgb_array":
            return self._render_frame()
        return None

    def close(self):
        self._surface = None
