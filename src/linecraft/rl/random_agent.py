from __future__ import annotations

import argparse
import logging
from typing import List, Optional, Tuple

import numpy as np
import gymnasium as gym

import linecraft.env  # noqa: F401
from linecraft.env.wrappers import FlattenDiscreteActionWrapper, ResampleInvalidActionWrapper


def play_random(
    env: gym.Env,
    episodes: int = 10,
    seed: Optional[int] = None,
    masked: bool = True,
) -> List[Tuple[int, int, int]]:
    """Play `episodes` games with uniformly random actions.

    With `masked` the agent only picks among valid placements; otherwise it
    samples the whole action space and relies on the env (or a
    `ResampleInvalidActionWrapper`) to deal with illegal drops.

    Returns (score, lines_cleared, steps) per game.
    """
    rng = np.random.default_rng(seed)
    results: List[Tuple[int, int, int]] = []
    for ep in range(episodes):
        obs, info = env.reset(seed=None if seed is None else seed + ep)
        done = False
        while not done:
            valid = np.flatnonzero(info["action_mask"].reshape(-1))
            if valid.size == 0:
                break
            if masked:
                action = int(rng.choice(valid))
            else:
                action = int(rng.integers(env.action_space.n))
            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
        results.append((int(info["score"]), int(info["lines_cleared_total"]), int(info["steps"])))
    return results


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play LineCraft games with a random valid-move agent")
    p.add_argument("--env", choices=["classic", "hard"], default="classic")
    p.add_argument("--episodes", type=int, default=10)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--resample", action="store_true", help="sample any action and resample the invalid ones")
    p.add_argument("--verbose", action="store_true", help="enable engine debug logging")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    env_id = "LineCraftHard-v0" if args.env == "hard" else "LineCraft-v0"
    env = FlattenDiscreteActionWrapper(gym.make(env_id))
    if args.resample:
        env = ResampleInvalidActionWrapper(env)
    try:
        results = play_random(env, episodes=args.episodes, seed=args.seed, masked=not args.resample)
    finally:
        env.close()

    for i, (score, lines, steps) in enumerate(results):
        print(f"game {i + 1}: score={score} lines={lines} placements={steps}")
    if results:
        scores = [r[0] for r in results]
        lines = [r[1] for r in results]
        print(f"mean score {np.mean(scores):.1f}  mean lines {np.mean(lines):.1f}  best {max(scores)}")


if __name__ == "__main__":  # pragma: no cover
    main()
