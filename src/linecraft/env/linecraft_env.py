from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from linecraft.game import Color, GameConfig, GameMode, GameSession


# Largest template bounding box in the catalog (h5 / v4 / sq3)
MAX_SHAPE_SIZE = 5


def _compute_action_mask(game: GameSession) -> np.ndarray:
    size = game.grid.size
    k = len(game.slots)
    mask = np.zeros((k, size, size), dtype=np.bool_)
    for slot, row, col in game.get_valid_actions():
        mask[slot, row, col] = True
    return mask


def _pad_shape(matrix) -> np.ndarray:
    out = np.zeros((MAX_SHAPE_SIZE, MAX_SHAPE_SIZE), dtype=np.int8)
    arr = np.asarray(matrix, dtype=np.int8)
    h, w = arr.shape
    out[:h, :w] = arr
    return out


class LineCraftEnv(gym.Env):
    """
    Gymnasium environment over a LineCraft session.

    Observation (Dict):
      grid:       (N, N) color index per cell, 0 for empty
      specials:   (N, N) special kind per cell (0 plain, 1 bomb, 2 frozen, 3 star)
      life:       (N, N) remaining life of frozen cells
      pieces:     (3, 5, 5) slot matrices, zero padded
      piece_mask: (3,) 1 where the slot still holds a shape
      combo:      (1,) current combo multiplier

    Action: MultiDiscrete((3, N, N)) = (slot, row, col)

    Reward: engine points for the placement, `invalid_action_penalty` for an
    illegal drop (the state is left unchanged).
    """

    metadata = {"render_modes": ["ansi", "rgb_array"], "render_fps": 30}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        mode: Optional[str] = None,
        render_mode: Optional[str] = None,
        invalid_action_penalty: float = -1.0,
        terminal_penalty: float = 0.0,
    ) -> None:
        super().__init__()
        self.config = config or GameConfig()
        if mode is not None:
            self.config = replace(self.config, mode=GameMode(mode))
        if self.config.mode is GameMode.TIME_RUSH:
            raise ValueError("the timed mode needs a wall clock and is not available as an environment")
        self.game = GameSession(self.config)
        self.render_mode = render_mode
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)

        size = self.config.size
        k = self.config.pieces_per_set
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=len(Color), shape=(size, size), dtype=np.int8),
                "specials": spaces.Box(low=0, high=3, shape=(size, size), dtype=np.int8),
                "life": spaces.Box(low=0, high=2, shape=(size, size), dtype=np.int8),
                "pieces": spaces.Box(low=0, high=1, shape=(k, MAX_SHAPE_SIZE, MAX_SHAPE_SIZE), dtype=np.int8),
                "piece_mask": spaces.Box(low=0, high=1, shape=(k,), dtype=np.int8),
                "combo": spaces.Box(low=1, high=np.iinfo(np.int32).max, shape=(1,), dtype=np.int32),
            }
        )
        self.action_space = spaces.MultiDiscrete((k, size, size))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        k = len(self.game.slots)
        pieces = np.zeros((k, MAX_SHAPE_SIZE, MAX_SHAPE_SIZE), dtype=np.int8)
        piece_mask = np.zeros((k,), dtype=np.int8)
        for i, shape in enumerate(self.game.slots):
            if shape is not None:
                pieces[i] = _pad_shape(shape.matrix)
                piece_mask[i] = 1
        return {
            "grid": self.game.grid.colors.copy(),
            "specials": self.game.grid.specials.copy(),
            "life": self.game.grid.life.copy(),
            "pieces": pieces,
            "piece_mask": piece_mask,
            "combo": np.array([self.game.score.combo], dtype=np.int32),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.game),
            "score": self.game.score.current,
            "level": self.game.score.level,
            "lines_cleared_total": self.game.total_lines_cleared,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        # Shapes are drawn from the env's seeded generator
        self.game.use_rng(self.np_random)
        self.game.start()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        slot, row, col = map(int, action)
        reward_components: Dict[str, float] = {}
        truncated = False

        if self.game.preview(slot, row, col):
            result = self.game.place(slot, row, col)
            reward_components["points"] = float(result.points)
            info_lines = result.lines_cleared
        else:
            reward_components["invalid"] = self.invalid_action_penalty
            info_lines = 0

        terminated = bool(self.game.game_over)
        if terminated:
            reward_components["terminal"] = self.terminal_penalty
        self._steps += 1
        if self._steps >= self.config.max_episode_steps:
            truncated = True

        reward = float(sum(reward_components.values()))
        info = self._get_info()
        info["reward_components"] = reward_components
        info["lines_cleared"] = info_lines
        return self._get_obs(), reward, terminated, truncated, info

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.game)

    def render(self):
        if self.render_mode == "ansi":
            lines = [f"Score: {self.game.score.current}  Combo: x{self.game.score.combo}", self.game.grid.render(), ""]
            for i, shape in enumerate(self.game.slots):
                if shape is None:
                    lines.append(f"  [{i}] (used)")
                    continue
                lines.append(f"  [{i}] {shape.name}:")
                for row in shape.matrix:
                    lines.append("      " + "".join("#" if v else "." for v in row))
            return "\n".join(lines)
        if self.render_mode == "rgb_array":
            grid = self.game.grid.colors
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    v = int(grid[y, x])
                    color = Color(v).rgb if v else (30, 30, 36)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        return None

    def close(self) -> None:
        pass
