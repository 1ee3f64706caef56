from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from linecraft.game import Cell, Color, Grid, Shape, SpecialBlock, SpecialType


class ScriptedRandom:
    """Random source replaying a fixed list of draws."""

    def __init__(self, draws: Iterable[float]) -> None:
        self.draws = list(draws)
        self.used = 0

    def random(self) -> float:
        value = self.draws[self.used]
        self.used += 1
        return value


_SYMBOLS = {
    "#": Cell(Color.BLUE),
    "B": Cell(Color.RED, SpecialType.BOMB),
    "*": Cell(Color.PINK, SpecialType.STAR),
    "F": Cell.frozen(Color.CYAN, 2),
    "2": Cell.frozen(Color.CYAN, 2),
    "1": Cell.frozen(Color.CYAN, 1),
    "0": Cell.frozen(Color.CYAN, 0),
}


def grid_from(lines: Sequence[str]) -> Grid:
    """Build a grid from strings: '.' empty, '#' plain, 'B' bomb, '*' star, 'F'/digit frozen."""
    rows = [[None if ch == "." else _SYMBOLS[ch] for ch in line] for line in lines]
    return Grid.from_rows(rows)


def full_grid(size: int = 8, holes: Iterable[Tuple[int, int]] = ()) -> Grid:
    rows = [["#"] * size for _ in range(size)]
    for r, c in holes:
        rows[r][c] = "."
    return grid_from(["".join(row) for row in rows])


def make_shape(
    matrix: Sequence[Sequence[int]],
    specials: Sequence[Tuple[int, int, SpecialType]] = (),
    color: Color = Color.BLUE,
    shape_id: str = "test",
) -> Shape:
    return Shape(
        id=shape_id,
        matrix=tuple(tuple(row) for row in matrix),
        color=color,
        special_blocks=tuple(SpecialBlock(r, c, kind) for r, c, kind in specials),
    )


def row_shape(length: int, specials: Sequence[Tuple[int, int, SpecialType]] = ()) -> Shape:
    return make_shape([[1] * length], specials)


DOT = make_shape([[1]])
