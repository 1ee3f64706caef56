from __future__ import annotations

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .linecraft_env import _compute_action_mask


class FlattenDiscreteActionWrapper(gym.ActionWrapper):
    """Flattens MultiDiscrete (slot, row, col) -> Discrete(N).

    Also exposes `get_action_mask()` returning a 1D boolean mask of shape (N,).
    Order: slot, row, col (C-order flattening).
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        assert isinstance(env.action_space, spaces.MultiDiscrete)
        k, rows, cols = map(int, env.action_space.nvec)
        assert rows == cols, "Expected square grid"
        self.k = k
        self.size = rows
        self.n = int(k * self.size * self.size)
        self.action_space = spaces.Discrete(self.n)

    def _unflatten(self, idx: int) -> tuple[int, int, int]:
        col = idx % self.size
        idx //= self.size
        row = idx % self.size
        slot = idx // self.size
        return int(slot), int(row), int(col)

    def action(self, action: int):  # type: ignore[override]
        return np.array(self._unflatten(int(action)), dtype=np.int64)

    def get_action_mask(self) -> np.ndarray:
        mask3d = _compute_action_mask(self.env.unwrapped.game)
        return mask3d.reshape(-1)


class ResampleInvalidActionWrapper(gym.Wrapper):
    """Swaps an illegal flat action for a legal one drawn from the env's RNG.

    Sits on top of `FlattenDiscreteActionWrapper`. `info["resampled"]` tells
    whether the submitted action was replaced; when nothing fits the action
    is passed through and the env applies its invalid-action penalty.
    """

    def step(self, action):  # type: ignore[override]
        mask = self.get_action_mask()
        idx = int(action)
        resampled = False
        if not (0 <= idx < mask.shape[0] and mask[idx]):
            legal = np.flatnonzero(mask)
            if legal.size:
                idx = int(self.np_random.choice(legal))
                resampled = True
        obs, reward, terminated, truncated, info = self.env.step(idx)
        info["resampled"] = resampled
        return obs, reward, terminated, truncated, info

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.env.unwrapped.game).reshape(-1)
