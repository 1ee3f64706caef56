"""Gymnasium environments for LineCraft."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Classic 8x8 board
register(
    id="LineCraft-v0",
    entry_point="linecraft.env.linecraft_env:LineCraftEnv",
)

# Hard mode: 7x7 board
register(
    id="LineCraftHard-v0",
    entry_point="linecraft.env.linecraft_env:LineCraftEnv",
    kwargs={"mode": "hard"},
)

__all__ = ["LineCraft-v0", "LineCraftHard-v0"]
