import pytest

from linecraft.game import (
    SHAPE_TEMPLATES,
    Cell,
    Color,
    Grid,
    IllegalPlacementError,
    InvalidCellError,
    LineCraftError,
    SpecialType,
    any_placeable,
    can_place,
    get_valid_placements,
    place_shape,
)

from tests.helpers import DOT, full_grid, grid_from, make_shape


def test_empty_grid():
    grid = Grid.empty(8)
    assert grid.size == 8
    assert grid.filled_count() == 0
    assert grid[3, 4] is None


def test_cell_life_only_for_frozen():
    with pytest.raises(InvalidCellError):
        Cell(Color.RED, SpecialType.BOMB, life=1)
    with pytest.raises(InvalidCellError):
        Cell(Color.RED, SpecialType.FROZEN)
    with pytest.raises(LineCraftError):
        Cell(Color.RED, life=0)
    assert Cell.frozen(Color.RED).life == 2


def test_grid_roundtrips_cells():
    grid = grid_from([
        "#B.",
        ".*2",
        "10.",
    ])
    assert grid[0, 0] == Cell(Color.BLUE)
    assert grid[0, 1].special is SpecialType.BOMB
    assert grid[0, 1].life is None
    assert grid[1, 2] == Cell.frozen(Color.CYAN, 2)
    assert grid[2, 1].life == 0
    assert grid.render() == "#B.\n.*2\n10."


def test_with_cell_returns_new_grid():
    grid = Grid.empty(4)
    other = grid.with_cell(1, 1, Cell(Color.GREEN))
    assert grid[1, 1] is None
    assert other[1, 1] == Cell(Color.GREEN)


def test_can_place_inside_empty_grid():
    shape = make_shape([[1, 1, 1]])
    grid = Grid.empty(8)
    assert can_place(grid, shape, 0, 0)
    assert can_place(grid, shape, 7, 5)


def test_can_place_rejects_out_of_bounds():
    shape = make_shape([[1, 1, 1]])
    grid = Grid.empty(8)
    assert not can_place(grid, shape, 7, 6)
    assert not can_place(grid, shape, -1, 0)
    assert not can_place(grid, shape, 0, -1)
    assert not can_place(grid, shape, 8, 0)


def test_can_place_rejects_collision():
    grid = Grid.empty(8).with_cell(2, 3, Cell(Color.RED))
    shape = make_shape([[1, 1], [1, 1]])
    assert not can_place(grid, shape, 1, 2)
    assert can_place(grid, shape, 0, 0)


def test_can_place_ignores_holes_in_shape():
    # The L leaves (0, 1) free, so an occupied cell there is fine
    grid = Grid.empty(4).with_cell(0, 1, Cell(Color.RED))
    shape = make_shape([[1, 0], [1, 0], [1, 1]])
    assert can_place(grid, shape, 0, 0)


def test_can_place_matches_bounds_and_occupancy_for_all_templates():
    grid = grid_from([
        "#......#",
        "...#....",
        "........",
        "..##....",
        "........",
        ".....#..",
        "........",
        "#.......",
    ])
    for template in SHAPE_TEMPLATES:
        shape = make_shape(template.matrix)
        for row in range(-2, 9):
            for col in range(-2, 9):
                targets = [(row + dr, col + dc) for dr, dc in shape.cells()]
                expected = all(
                    0 <= r < 8 and 0 <= c < 8 and grid[r, c] is None for r, c in targets
                )
                assert can_place(grid, shape, row, col) == expected


def test_shape_larger_than_grid_is_never_placeable():
    grid = Grid.empty(4)
    shape = make_shape([[1, 1, 1, 1, 1]])
    assert get_valid_placements(grid, shape) == []
    assert not any_placeable(grid, [shape])


def test_any_placeable_with_only_empty_slots():
    assert any_placeable(full_grid(), [None, None, None])
    assert any_placeable(full_grid(), [])


def test_any_placeable_on_full_grid():
    assert not any_placeable(full_grid(), [DOT, None, DOT])


def test_any_placeable_finds_single_hole():
    grid = full_grid(holes=[(5, 6)])
    assert any_placeable(grid, [make_shape([[1, 1]]), None, DOT])
    assert not any_placeable(grid, [make_shape([[1, 1]])])


def test_get_valid_placements():
    grid = full_grid(size=4, holes=[(0, 0), (0, 1), (3, 3)])
    assert get_valid_placements(grid, DOT) == [(0, 0), (0, 1), (3, 3)]
    assert get_valid_placements(grid, make_shape([[1, 1]])) == [(0, 0)]


def test_place_writes_color_without_mutating_source():
    grid = Grid.empty(8)
    shape = make_shape([[1, 1], [0, 1]], color=Color.ORANGE)
    result = place_shape(grid, shape, 2, 3)
    assert grid.filled_count() == 0
    assert result.grid.filled_count() == 3
    assert result.grid[2, 3] == Cell(Color.ORANGE)
    assert result.grid[3, 4] == Cell(Color.ORANGE)
    assert result.grid[3, 3] is None
    assert result.bomb_triggered is False
    assert result.cells_placed == 3


def test_place_never_overwrites_occupied_cells():
    grid = grid_from([
        "#...",
        ".#..",
        "....",
        "...#",
    ])
    shape = make_shape([[1, 1], [0, 1]])
    for row, col in get_valid_placements(grid, shape):
        placed = place_shape(grid, shape, row, col).grid
        assert placed.filled_count() == grid.filled_count() + shape.size


def test_place_frozen_and_star_cells():
    shape = make_shape([[1, 1, 1]], specials=[(0, 0, SpecialType.FROZEN)])
    result = place_shape(Grid.empty(8), shape, 4, 4)
    assert result.grid[4, 4] == Cell.frozen(shape.color, 2)
    assert result.grid[4, 5] == Cell(shape.color)

    star = make_shape([[1]], specials=[(0, 0, SpecialType.STAR)])
    result = place_shape(Grid.empty(8), star, 0, 0)
    assert result.grid[0, 0].special is SpecialType.STAR
    assert result.grid[0, 0].life is None
    assert result.bomb_triggered is False


def test_place_unvalidated_raises():
    grid = Grid.empty(8).with_cell(0, 0, Cell(Color.RED))
    with pytest.raises(IllegalPlacementError):
        place_shape(grid, DOT, 0, 0)
    with pytest.raises(IllegalPlacementError):
        place_shape(grid, make_shape([[1, 1]]), 0, 7)


def test_bomb_clears_three_by_three_neighbourhood():
    grid = full_grid(holes=[(3, 3)])
    bomb = make_shape([[1]], specials=[(0, 0, SpecialType.BOMB)])
    result = place_shape(grid, bomb, 3, 3)
    assert result.bomb_triggered
    assert result.bomb_center == (3, 3)
    for r in range(8):
        for c in range(8):
            inside = 2 <= r <= 4 and 2 <= c <= 4
            assert (result.grid[r, c] is None) == inside
    # source untouched
    assert grid.filled_count() == 63


def test_bomb_overrides_special_cells():
    grid = grid_from([
        "*2..",
        "B...",
        "....",
        "....",
    ])
    bomb = make_shape([[1]], specials=[(0, 0, SpecialType.BOMB)])
    result = place_shape(grid, bomb, 1, 1)
    assert result.grid.filled_count() == 0


def test_bomb_in_corner_is_clipped():
    grid = full_grid(holes=[(0, 0)])
    bomb = make_shape([[1]], specials=[(0, 0, SpecialType.BOMB)])
    result = place_shape(grid, bomb, 0, 0)
    empties = {(r, c) for r in range(8) for c in range(8) if result.grid[r, c] is None}
    assert empties == {(0, 0), (0, 1), (1, 0), (1, 1)}


def test_bomb_inside_larger_shape_uses_absolute_coordinate():
    bomb_line = make_shape([[1, 1, 1, 1]], specials=[(0, 3, SpecialType.BOMB)])
    result = place_shape(Grid.empty(8), bomb_line, 5, 1)
    assert result.bomb_center == (5, 4)
    # cells (5, 3..5) were wiped, (5, 1) and (5, 2) survive
    assert result.grid[5, 1] is not None
    assert result.grid[5, 2] is not None
    assert result.grid.filled_count() == 2
