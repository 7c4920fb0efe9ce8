from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from blockfall.game import COLORS, Action, BlockfallGame, GameConfig, ManualScheduler


class BlockfallEnv(gym.Env):
    """
    Falling-block environment over the real engine and its timers.

    Actions (6 total):
      0: No-op
      1: Move Left
      2: Move Right
      3: Rotate
      4: Soft Drop (one immediate step down)
      5: Hard Drop

    After each action the virtual clock advances by one normal tick period,
    so gravity and the seconds clock run exactly as in interactive play.
    Reward is the change in engine score.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    ACT_NOOP = 0
    ACT_LEFT = 1
    ACT_RIGHT = 2
    ACT_ROTATE = 3
    ACT_SOFT_DROP = 4
    ACT_HARD_DROP = 5

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        max_episode_steps: int = 10000,
    ) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)
        self.scheduler = ManualScheduler()
        self.game = BlockfallGame(self.config, scheduler=self.scheduler)

        h, w = self.config.height, self.config.width
        self.observation_space = spaces.Box(low=-7, high=7, shape=(h, w), dtype=np.int8)
        self.action_space = spaces.Discrete(6)
        self._steps = 0

    def _get_obs(self) -> np.ndarray:
        return self.game.get_state().astype(np.int8)

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "lines_cleared_total": self.game.lines_cleared_total,
            "elapsed_seconds": self.game.elapsed_seconds,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.rng.seed(seed)
        self.game.restart()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def _apply(self, action: int) -> None:
        if action == self.ACT_LEFT:
            self.game.handle(Action.MOVE_LEFT)
        elif action == self.ACT_RIGHT:
            self.game.handle(Action.MOVE_RIGHT)
        elif action == self.ACT_ROTATE:
            self.game.handle(Action.ROTATE_CW)
        elif action == self.ACT_SOFT_DROP:
            self.game.advance_one_step()
        elif action == self.ACT_HARD_DROP:
            self.game.handle(Action.HARD_DROP)

    def step(self, action: int):
        action = int(action)
        if not self.action_space.contains(action):
            raise ValueError(f"invalid action {action}")

        score_before = self.game.score
        self._apply(action)
        if not self.game.game_over:
            self.scheduler.advance(self.config.normal_tick_ms)
        self._steps += 1

        reward = float(self.game.score - score_before)
        terminated = bool(self.game.game_over)
        truncated = self._steps >= self.max_episode_steps and not terminated
        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        state = self.game.get_state()
        cell = 12
        h, w = state.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        img[:, :, :] = (30, 30, 36)
        for y in range(h):
            for x in range(w):
                v = abs(int(state[y, x]))
                if v:
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = COLORS[v]
        return img

    def close(self) -> None:
        self.game.pause()
