from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, List, Optional, Protocol, Sequence, Tuple

import numpy as np

from .errors import InvalidShapeError


logger = logging.getLogger(__name__)


Matrix = Tuple[Tuple[int, ...], ...]


class Color(IntEnum):
    """Block colors. Zero is reserved for empty cells in grid planes."""

    BLUE = 1
    RED = 2
    GREEN = 3
    YELLOW = 4
    PURPLE = 5
    CYAN = 6
    ORANGE = 7
    PINK = 8

    @property
    def hex(self) -> str:
        return _COLOR_HEX[self]

    @property
    def rgb(self) -> Tuple[int, int, int]:
        h = self.hex.lstrip("#")
        return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


_COLOR_HEX = {
    Color.BLUE: "#3b82f6",
    Color.RED: "#ef4444",
    Color.GREEN: "#22c55e",
    Color.YELLOW: "#eab308",
    Color.PURPLE: "#a855f7",
    Color.CYAN: "#06b6d4",
    Color.ORANGE: "#f97316",
    Color.PINK: "#ec4899",
}


class SpecialType(IntEnum):
    """Special-block kinds. Zero is reserved for plain cells in grid planes."""

    BOMB = 1
    FROZEN = 2
    STAR = 3


@dataclass(frozen=True)
class SpecialBlock:
    row: int
    col: int
    kind: SpecialType


def _as_matrix(rows: Sequence[Sequence[int]]) -> Matrix:
    return tuple(tuple(1 if v else 0 for v in row) for row in rows)


@dataclass(frozen=True)
class ShapeTemplate:
    name: str
    matrix: Matrix
    color: Color


@dataclass(frozen=True)
class Shape:
    """A generated piece: template occupancy plus identity and specials.

    Construction validates the matrix (rectangular, at least one filled cell)
    and that every special block sits on a filled cell.
    """

    id: str
    matrix: Matrix
    color: Color
    special_blocks: Tuple[SpecialBlock, ...] = field(default_factory=tuple)
    name: str = ""

    def __post_init__(self) -> None:
        matrix = _as_matrix(self.matrix)
        object.__setattr__(self, "matrix", matrix)
        object.__setattr__(self, "special_blocks", tuple(self.special_blocks))
        if not matrix or not matrix[0]:
            raise InvalidShapeError("shape matrix must not be empty")
        width = len(matrix[0])
        if any(len(row) != width for row in matrix):
            raise InvalidShapeError("shape matrix must be rectangular")
        if not any(any(row) for row in matrix):
            raise InvalidShapeError("shape matrix needs at least one filled cell")
        for sb in self.special_blocks:
            if not (0 <= sb.row < len(matrix) and 0 <= sb.col < width) or not matrix[sb.row][sb.col]:
                raise InvalidShapeError(
                    f"special block {sb.kind.name} at ({sb.row}, {sb.col}) is outside the shape footprint"
                )

    @property
    def height(self) -> int:
        return len(self.matrix)

    @property
    def width(self) -> int:
        return len(self.matrix[0])

    @property
    def size(self) -> int:
        """Number of filled cells."""
        return sum(sum(row) for row in self.matrix)

    def cells(self) -> Iterator[Tuple[int, int]]:
        """Yield local (row, col) of every filled cell, row-major."""
        for r, row in enumerate(self.matrix):
            for c, v in enumerate(row):
                if v:
                    yield r, c

    def special_at(self, row: int, col: int) -> Optional[SpecialType]:
        for sb in self.special_blocks:
            if sb.row == row and sb.col == col:
                return sb.kind
        return None

    def to_array(self) -> np.ndarray:
        return np.array(self.matrix, dtype=np.int8)


def _template(name: str, rows: Sequence[Sequence[int]], color: Color) -> ShapeTemplate:
    return ShapeTemplate(name, _as_matrix(rows), color)


SHAPE_TEMPLATES: Tuple[ShapeTemplate, ...] = (
    # Dot
    _template("dot", [[1]], Color.BLUE),
    # Lines
    _template("h2", [[1, 1]], Color.CYAN),
    _template("h3", [[1, 1, 1]], Color.CYAN),
    _template("h4", [[1, 1, 1, 1]], Color.CYAN),
    _template("h5", [[1, 1, 1, 1, 1]], Color.CYAN),
    _template("v2", [[1], [1]], Color.CYAN),
    _template("v3", [[1], [1], [1]], Color.CYAN),
    _template("v4", [[1], [1], [1], [1]], Color.CYAN),
    # Squares
    _template("sq2", [[1, 1], [1, 1]], Color.YELLOW),
    _template("sq3", [[1, 1, 1], [1, 1, 1], [1, 1, 1]], Color.YELLOW),
    # L-shapes
    _template("L1", [[1, 0], [1, 0], [1, 1]], Color.ORANGE),
    _template("L2", [[0, 1], [0, 1], [1, 1]], Color.ORANGE),
    _template("L3", [[1, 1], [1, 0], [1, 0]], Color.ORANGE),
    _template("L4", [[1, 1], [0, 1], [0, 1]], Color.ORANGE),
    # T-shapes
    _template("T1", [[1, 1, 1], [0, 1, 0]], Color.PURPLE),
    _template("T2", [[0, 1, 0], [1, 1, 1]], Color.PURPLE),
    _template("T3", [[1, 0], [1, 1], [1, 0]], Color.PURPLE),
    _template("T4", [[0, 1], [1, 1], [0, 1]], Color.PURPLE),
    # Z-shapes
    _template("Z1", [[1, 1, 0], [0, 1, 1]], Color.RED),
    _template("Z2", [[0, 1, 1], [1, 1, 0]], Color.RED),
    _template("Z3", [[1, 0], [1, 1], [0, 1]], Color.RED),
    _template("Z4", [[0, 1], [1, 1], [1, 0]], Color.RED),
)

SPECIAL_KINDS: Tuple[SpecialType, ...] = (SpecialType.BOMB, SpecialType.FROZEN, SpecialType.STAR)


class RandomSource(Protocol):
    """Anything with a `random()` method returning a float in [0, 1).

    `random.Random` and `numpy.random.Generator` both qualify.
    """

    def random(self) -> float: ...


def _pick(rng: RandomSource, n: int) -> int:
    # Guard against sources that return exactly 1.0
    return min(int(rng.random() * n), n - 1)


class ShapeGenerator:
    """Draws shapes from the catalog using an injected random source."""

    def __init__(
        self,
        rng: RandomSource,
        templates: Sequence[ShapeTemplate] = SHAPE_TEMPLATES,
        special_chance: float = 0.10,
    ) -> None:
        if not templates:
            raise InvalidShapeError("shape catalog is empty")
        self.rng = rng
        self.templates = tuple(templates)
        self.special_chance = float(special_chance)
        self._ids = itertools.count(1)

    def _next_id(self) -> str:
        return f"shape-{next(self._ids)}"

    def generate(self) -> Shape:
        template = self.templates[_pick(self.rng, len(self.templates))]
        specials: List[SpecialBlock] = []
        if self.rng.random() < self.special_chance:
            ones = [(r, c) for r, row in enumerate(template.matrix) for c, v in enumerate(row) if v]
            r, c = ones[_pick(self.rng, len(ones))]
            kind = SPECIAL_KINDS[_pick(self.rng, len(SPECIAL_KINDS))]
            specials.append(SpecialBlock(r, c, kind))
            logger.debug("attached %s to %s at (%d, %d)", kind.name, template.name, r, c)
        return Shape(
            id=self._next_id(),
            matrix=template.matrix,
            color=template.color,
            special_blocks=tuple(specials),
            name=template.name,
        )
