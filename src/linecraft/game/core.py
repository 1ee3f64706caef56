from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from linecraft.profile import Profile, ProfileStore

from .errors import IllegalPlacementError, SessionStateError
from .grid import Grid, any_placeable, can_place, clear_lines, get_valid_placements, place_shape
from .pieces import RandomSource, Shape, ShapeGenerator
from .rules import ScoreState, ScoringRules


logger = logging.getLogger(__name__)


class GameMode(str, Enum):
    CLASSIC = "classic"
    TIME_RUSH = "time_rush"
    HARD = "hard"


class GameState(str, Enum):
    MENU = "menu"
    PLAYING = "playing"
    PAUSED = "paused"
    GAMEOVER = "gameover"


@dataclass
class GameConfig:
    mode: GameMode = GameMode.CLASSIC
    grid_size: Optional[int] = None  # None: 7 for HARD, 8 otherwise
    pieces_per_set: int = 3
    max_set_attempts: int = 10
    special_chance: float = 0.10
    time_limit: int = 60
    random_seed: Optional[int] = None
    max_episode_steps: int = 10000

    def size_for(self, mode: GameMode) -> int:
        if self.grid_size is not None:
            return int(self.grid_size)
        return 7 if mode is GameMode.HARD else 8

    @property
    def size(self) -> int:
        return self.size_for(self.mode)


def generate_shape_set(
    grid: Grid,
    generator: ShapeGenerator,
    count: int = 3,
    max_attempts: int = 10,
) -> List[Shape]:
    """Draw `count` shapes, redrawing the whole set while none of them fits.

    Gives up after `max_attempts` redraws and returns the last set, which may
    be unplaceable; callers detect that with `any_placeable`.
    """
    shapes = [generator.generate() for _ in range(count)]
    attempt = 0
    while not any_placeable(grid, shapes) and attempt < max_attempts:
        shapes = [generator.generate() for _ in range(count)]
        attempt += 1
    if attempt:
        logger.debug("shape set redrawn %d time(s)", attempt)
    return shapes


def anchor_from_pointer(
    x: float,
    y: float,
    board_left: float,
    board_top: float,
    board_width: float,
    grid_size: int,
    shape: Shape,
) -> Tuple[int, int]:
    """Map a pointer position over the board to the anchor (row, col).

    The shape is centered under the pointer; the result may lie off the board,
    in which case `can_place` rejects it.
    """
    cell = board_width / grid_size
    col = math.floor((x - board_left - cell * shape.width / 2) / cell + 0.5)
    row = math.floor((y - board_top - cell * shape.height / 2) / cell + 0.5)
    return int(row), int(col)


@dataclass
class TurnResult:
    points: int
    lines_cleared: int
    combo: int
    bomb_triggered: bool = False
    rows: List[int] = field(default_factory=list)
    cols: List[int] = field(default_factory=list)
    level_ups: int = 0
    new_set: bool = False
    game_over: bool = False


class GameSession:
    """Headless session controller: owns the grid, slots and score.

    Turn protocol: `preview` to check a drop target, `place` to commit it
    (place, clear lines, score, refill slots, game-over check) and `tick`
    once per second in the timed mode.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        rng: Optional[RandomSource] = None,
        profile: Optional[Profile] = None,
        store: Optional[ProfileStore] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = rng if rng is not None else random.Random(self.config.random_seed)
        self.generator = ShapeGenerator(self.rng, special_chance=self.config.special_chance)
        self.store = store
        if profile is None:
            profile = store.load() if store is not None else Profile()
        self.profile = profile

        self.mode = self.config.mode
        self.state = GameState.MENU
        self.grid = Grid.empty(self.config.size)
        self.slots: List[Optional[Shape]] = [None] * self.config.pieces_per_set
        self.score = ScoreState(
            best=profile.best,
            experience=profile.experience,
            level=profile.level,
        )
        self.total_lines_cleared = 0
        self.total_pieces_placed = 0

    # ---------- Lifecycle ----------
    def use_rng(self, rng: RandomSource) -> None:
        """Swap the random source, e.g. after an environment reseeds."""
        self.rng = rng
        self.generator.rng = rng

    def start(self, mode: Optional[GameMode] = None) -> None:
        """Begin a new game. Experience, level and best score carry over."""
        if mode is not None:
            self.mode = GameMode(mode)
        self.grid = Grid.empty(self.config.size_for(self.mode))
        self.slots = list(self._new_set())
        self.score.current = 0
        self.score.combo = 1
        self.score.time_left = self.config.time_limit if self.mode is GameMode.TIME_RUSH else None
        self.total_lines_cleared = 0
        self.total_pieces_placed = 0
        self.state = GameState.PLAYING
        logger.debug("started %s game on %dx%d grid", self.mode.value, self.grid.size, self.grid.size)

    def pause(self) -> None:
        if self.state is not GameState.PLAYING:
            raise SessionStateError(f"cannot pause while {self.state.value}")
        self.state = GameState.PAUSED

    def resume(self) -> None:
        if self.state is not GameState.PAUSED:
            raise SessionStateError(f"cannot resume while {self.state.value}")
        self.state = GameState.PLAYING

    def end(self) -> None:
        self.state = GameState.GAMEOVER
        logger.debug("game over: score=%d", self.score.current)

    @property
    def game_over(self) -> bool:
        return self.state is GameState.GAMEOVER

    # ---------- Turns ----------
    def _new_set(self) -> List[Shape]:
        return generate_shape_set(
            self.grid,
            self.generator,
            count=self.config.pieces_per_set,
            max_attempts=self.config.max_set_attempts,
        )

    def _slot_shape(self, slot: int) -> Shape:
        if not 0 <= slot < len(self.slots):
            raise IllegalPlacementError(f"slot {slot} out of range")
        shape = self.slots[slot]
        if shape is None:
            raise IllegalPlacementError(f"slot {slot} already used")
        return shape

    def preview(self, slot: int, row: int, col: int) -> bool:
        """Whether the shape in `slot` may be dropped at (row, col)."""
        shape = self.slots[slot] if 0 <= slot < len(self.slots) else None
        if shape is None or self.state is not GameState.PLAYING:
            return False
        return can_place(self.grid, shape, row, col)

    def place(self, slot: int, row: int, col: int) -> TurnResult:
        if self.state is not GameState.PLAYING:
            raise SessionStateError(f"cannot place while {self.state.value}")
        shape = self._slot_shape(slot)

        placement = place_shape(self.grid, shape, row, col)
        cleared = clear_lines(placement.grid)
        award = self.rules.settle(self.score, shape, cleared.lines_cleared)

        self.grid = cleared.grid
        self.total_lines_cleared += cleared.lines_cleared
        self.total_pieces_placed += 1
        self.slots[slot] = None

        new_set = all(s is None for s in self.slots)
        if new_set:
            self.slots = list(self._new_set())
        if not any_placeable(self.grid, self.slots):
            self.end()

        self._save_profile()
        return TurnResult(
            points=award.points,
            lines_cleared=cleared.lines_cleared,
            combo=award.combo,
            bomb_triggered=placement.bomb_triggered,
            rows=cleared.rows,
            cols=cleared.cols,
            level_ups=award.level_ups,
            new_set=new_set,
            game_over=self.game_over,
        )

    def tick(self) -> bool:
        """Advance the timed-mode countdown by one second.

        Returns True when this tick ended the game. Ignored unless playing a
        timed game.
        """
        if self.state is not GameState.PLAYING or self.score.time_left is None:
            return False
        self.score.time_left = max(self.score.time_left - 1, 0)
        if self.score.time_left == 0:
            self.end()
            return True
        return False

    def get_valid_actions(self) -> List[Tuple[int, int, int]]:
        """List of (slot, row, col) legal placements."""
        actions: List[Tuple[int, int, int]] = []
        for idx, shape in enumerate(self.slots):
            if shape is None:
                continue
            for row, col in get_valid_placements(self.grid, shape):
                actions.append((idx, row, col))
        return actions

    # ---------- Persistence ----------
    def _save_profile(self) -> None:
        self.profile.best = self.score.best
        self.profile.experience = self.score.experience
        self.profile.level = self.score.level
        if self.store is not None:
            self.store.save(self.profile)

    def reset_best(self) -> None:
        self.score.best = 0
        self._save_profile()

    def set_preferences(
        self,
        theme: Optional[str] = None,
        language: Optional[str] = None,
        muted: Optional[bool] = None,
    ) -> None:
        """Update settings and persist them. Raises ValueError on an unknown value."""
        if theme is not None:
            self.profile.theme = theme
        if language is not None:
            self.profile.language = language
        if muted is not None:
            self.profile.muted = muted
        self._save_profile()

    def get_state(self) -> dict:
        return {
            "mode": self.mode.value,
            "state": self.state.value,
            "grid": self.grid.rows(),
            "slots": list(self.slots),
            "score": self.score.current,
            "best": self.score.best,
            "combo": self.score.combo,
            "experience": self.score.experience,
            "level": self.score.level,
            "time_left": self.score.time_left,
            "total_lines_cleared": self.total_lines_cleared,
            "total_pieces_placed": self.total_pieces_placed,
        }

