from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .errors import IllegalPlacementError, InvalidCellError
from .pieces import Color, Shape, SpecialType


logger = logging.getLogger(__name__)


Coordinate = Tuple[int, int]

FROZEN_LIFE = 2


@dataclass(frozen=True)
class Cell:
    """Occupied grid cell. `life` is only carried by frozen cells."""

    color: Color
    special: Optional[SpecialType] = None
    life: Optional[int] = None

    def __post_init__(self) -> None:
        if self.special is SpecialType.FROZEN:
            if self.life is None or self.life < 0:
                raise InvalidCellError("frozen cells need a non-negative life")
        elif self.life is not None:
            raise InvalidCellError("only frozen cells carry a life counter")

    @classmethod
    def frozen(cls, color: Color, life: int = FROZEN_LIFE) -> "Cell":
        return cls(color, SpecialType.FROZEN, life)

    @property
    def is_shielded(self) -> bool:
        """Frozen with life left: resists being cleared."""
        return self.special is SpecialType.FROZEN and bool(self.life)


class Grid:
    """Square board stored as three int8 planes addressed by (row, col).

    colors: 0 for empty, otherwise a `Color` value
    specials: 0 for plain, otherwise a `SpecialType` value
    life: remaining durability of frozen cells, 0 elsewhere

    Engine functions never mutate a grid they receive; they work on a copy
    and return it.
    """

    def __init__(self, size: int) -> None:
        self.size = int(size)
        self.colors = np.zeros((self.size, self.size), dtype=np.int8)
        self.specials = np.zeros((self.size, self.size), dtype=np.int8)
        self.life = np.zeros((self.size, self.size), dtype=np.int8)

    @classmethod
    def empty(cls, size: int) -> "Grid":
        return cls(size)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Optional[Cell]]]) -> "Grid":
        size = len(rows)
        if any(len(row) != size for row in rows):
            raise ValueError("grid rows must form a square")
        grid = cls(size)
        for r, row in enumerate(rows):
            for c, cell in enumerate(row):
                grid.set_cell(r, c, cell)
        return grid

    def copy(self) -> "Grid":
        new_grid = Grid(self.size)
        new_grid.colors = self.colors.copy()
        new_grid.specials = self.specials.copy()
        new_grid.life = self.life.copy()
        return new_grid

    def is_inside(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def is_empty(self, row: int, col: int) -> bool:
        return self.colors[row, col] == 0

    def __getitem__(self, pos: Coordinate) -> Optional[Cell]:
        row, col = pos
        color = int(self.colors[row, col])
        if color == 0:
            return None
        special = int(self.specials[row, col])
        if special == 0:
            return Cell(Color(color))
        kind = SpecialType(special)
        life = int(self.life[row, col]) if kind is SpecialType.FROZEN else None
        return Cell(Color(color), kind, life)

    def set_cell(self, row: int, col: int, cell: Optional[Cell]) -> None:
        """Write in place, on a grid the caller owns (a fresh grid or a copy)."""
        if cell is None:
            self.colors[row, col] = 0
            self.specials[row, col] = 0
            self.life[row, col] = 0
            return
        self.colors[row, col] = int(cell.color)
        self.specials[row, col] = int(cell.special) if cell.special is not None else 0
        self.life[row, col] = cell.life or 0

    def with_cell(self, row: int, col: int, cell: Optional[Cell]) -> "Grid":
        new_grid = self.copy()
        new_grid.set_cell(row, col, cell)
        return new_grid

    def occupancy(self) -> np.ndarray:
        return self.colors != 0

    def shielded(self) -> np.ndarray:
        return (self.specials == SpecialType.FROZEN) & (self.life > 0)

    def rows(self) -> List[List[Optional[Cell]]]:
        return [[self[r, c] for c in range(self.size)] for r in range(self.size)]

    def filled_count(self) -> int:
        return int(np.count_nonzero(self.colors))

    def get_filled_ratio(self) -> float:
        return float(self.filled_count()) / float(self.size * self.size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self.size == other.size
            and np.array_equal(self.colors, other.colors)
            and np.array_equal(self.specials, other.specials)
            and np.array_equal(self.life, other.life)
        )

    def __repr__(self) -> str:
        return f"Grid(size={self.size}, filled={self.filled_count()})"

    def render(self) -> str:
        symbols = {SpecialType.BOMB: "B", SpecialType.STAR: "*"}
        lines = []
        for r in range(self.size):
            line = ""
            for c in range(self.size):
                cell = self[r, c]
                if cell is None:
                    line += "."
                elif cell.special is SpecialType.FROZEN:
                    line += str(cell.life)
                else:
                    line += symbols.get(cell.special, "#")
            lines.append(line)
        return "\n".join(lines)


def can_place(grid: Grid, shape: Shape, row: int, col: int) -> bool:
    """True when every filled shape cell lands inside the grid on an empty cell."""
    for dr, dc in shape.cells():
        r, c = row + dr, col + dc
        if not grid.is_inside(r, c):
            return False
        if not grid.is_empty(r, c):
            return False
    return True


def get_valid_placements(grid: Grid, shape: Shape) -> List[Coordinate]:
    """All (row, col) anchors where `shape` fits."""
    positions: List[Coordinate] = []
    for row in range(grid.size - shape.height + 1):
        for col in range(grid.size - shape.width + 1):
            if can_place(grid, shape, row, col):
                positions.append((row, col))
    return positions


def any_placeable(grid: Grid, shapes: Iterable[Optional[Shape]]) -> bool:
    """Whether some shape in `shapes` fits somewhere. Empty slots are ignored.

    With no shapes left nothing is blocked, so the answer is True.
    """
    active = [s for s in shapes if s is not None]
    if not active:
        return True
    for shape in active:
        for row in range(grid.size - shape.height + 1):
            for col in range(grid.size - shape.width + 1):
                if can_place(grid, shape, row, col):
                    return True
    return False


@dataclass
class PlacementResult:
    grid: Grid
    bomb_triggered: bool
    bomb_center: Optional[Coordinate] = None
    cells_placed: int = 0


def place_shape(grid: Grid, shape: Shape, row: int, col: int) -> PlacementResult:
    """Write `shape` at (row, col) onto a copy of `grid` and detonate bombs.

    The caller must have checked `can_place`; an unvalidated placement raises
    `IllegalPlacementError`.
    """
    if not can_place(grid, shape, row, col):
        raise IllegalPlacementError(f"shape {shape.id} does not fit at ({row}, {col})")

    new_grid = grid.copy()
    bomb_center: Optional[Coordinate] = None
    cells_placed = 0
    for dr, dc in shape.cells():
        r, c = row + dr, col + dc
        kind = shape.special_at(dr, dc)
        if kind is SpecialType.FROZEN:
            cell = Cell.frozen(shape.color)
        else:
            cell = Cell(shape.color, kind)
            if kind is SpecialType.BOMB:
                bomb_center = (r, c)
        new_grid.set_cell(r, c, cell)
        cells_placed += 1

    if bomb_center is not None:
        br, bc = bomb_center
        r0, r1 = max(br - 1, 0), min(br + 2, new_grid.size)
        c0, c1 = max(bc - 1, 0), min(bc + 2, new_grid.size)
        new_grid.colors[r0:r1, c0:c1] = 0
        new_grid.specials[r0:r1, c0:c1] = 0
        new_grid.life[r0:r1, c0:c1] = 0
        logger.debug("bomb detonated at %s", bomb_center)

    return PlacementResult(
        grid=new_grid,
        bomb_triggered=bomb_center is not None,
        bomb_center=bomb_center,
        cells_placed=cells_placed,
    )


@dataclass
class LineClearResult:
    grid: Grid
    lines_cleared: int
    rows: List[int]
    cols: List[int]
    cells_cleared: int = 0
    stars_triggered: int = 0


def clear_lines(grid: Grid) -> LineClearResult:
    """Clear full rows and columns on a copy of `grid`.

    A line is full when all of its cells are occupied. Frozen cells with life
    left count towards a full line but lose one life instead of clearing, and
    survive the pass in which they were decremented. A star caught in a full
    line drags its whole row and column into the clear.
    """
    new_grid = grid.copy()
    occupied = new_grid.occupancy()

    rows = [int(r) for r in np.flatnonzero(occupied.all(axis=1))]
    cols = [int(c) for c in np.flatnonzero(occupied.all(axis=0))]
    if not rows and not cols:
        return LineClearResult(grid=new_grid, lines_cleared=0, rows=[], cols=[])

    in_line = np.zeros_like(occupied)
    in_line[rows, :] = True
    in_line[:, cols] = True
    in_line &= occupied

    decremented = in_line & new_grid.shielded()
    new_grid.life[decremented] -= 1

    stars = in_line & (new_grid.specials == SpecialType.STAR)
    star_positions = [(int(r), int(c)) for r, c in zip(*np.nonzero(stars))]
    for r, c in star_positions:
        if r not in rows:
            rows.append(r)
        if c not in cols:
            cols.append(c)
    if star_positions:
        logger.debug("star chain from %s", star_positions)

    to_clear = np.zeros_like(occupied)
    to_clear[rows, :] = True
    to_clear[:, cols] = True
    to_clear &= occupied & ~decremented & ~new_grid.shielded()

    cells_cleared = int(np.count_nonzero(to_clear))
    new_grid.colors[to_clear] = 0
    new_grid.specials[to_clear] = 0
    new_grid.life[to_clear] = 0

    return LineClearResult(
        grid=new_grid,
        lines_cleared=len(rows) + len(cols),
        rows=sorted(rows),
        cols=sorted(cols),
        cells_cleared=cells_cleared,
        stars_triggered=len(star_positions),
    )
