from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .pieces import Shape


logger = logging.getLogger(__name__)


@dataclass
class ScoreState:
    current: int = 0
    best: int = 0
    combo: int = 1
    experience: int = 0
    level: int = 1
    time_left: Optional[int] = None


@dataclass
class Award:
    points: int
    combo: int
    level_ups: int = 0


@dataclass
class ScoringRules:
    # Bonus for 1, 2, 3 and more than 3 lines in a single placement
    line_bonuses: Tuple[int, int, int, int] = (10, 25, 45, 70)
    level_step: int = 200

    def line_bonus(self, lines: int) -> int:
        if lines <= 0:
            return 0
        return self.line_bonuses[min(lines, len(self.line_bonuses)) - 1]

    def next_combo(self, combo_before: int, lines: int) -> int:
        return combo_before + 1 if lines > 0 else 1

    def award(self, shape: Shape, lines: int, combo_before: int) -> int:
        """Points for placing `shape` and clearing `lines` lines.

        The multiplier is the combo *after* this placement.
        """
        points = shape.size + self.line_bonus(lines)
        combo = self.next_combo(combo_before, lines)
        if combo > 1:
            points *= combo
        return points

    def required_experience(self, level: int) -> int:
        return level * self.level_step

    def add_experience(self, level: int, experience: int, points: int) -> Tuple[int, int]:
        """Return (level, experience) after gaining `points` experience."""
        if level < 1 or self.level_step < 1:
            raise ValueError("level and level_step must be positive")
        experience += points
        while experience >= self.required_experience(level):
            experience -= self.required_experience(level)
            level += 1
        return level, experience

    def settle(self, state: ScoreState, shape: Shape, lines: int) -> Award:
        """Apply one placement to `state` in place and return what was earned."""
        points = self.award(shape, lines, state.combo)
        state.combo = self.next_combo(state.combo, lines)
        state.current += points
        state.best = max(state.best, state.current)
        level_before = state.level
        state.level, state.experience = self.add_experience(state.level, state.experience, points)
        level_ups = state.level - level_before
        if level_ups:
            logger.debug("level up: %d -> %d", level_before, state.level)
        return Award(points=points, combo=state.combo, level_ups=level_ups)
