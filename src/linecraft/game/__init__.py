"""Game module for LineCraft.

Exports the placement and line-clearing engine:
- Shape, ShapeGenerator, SHAPE_TEMPLATES: the piece catalog and its generator
- Grid, Cell: board representation
- can_place, any_placeable, place_shape, clear_lines: placement and clearing
- ScoringRules, ScoreState: points, combo and level progression
- GameSession: headless turn protocol driving all of the above
"""

from .errors import (
    IllegalPlacementError,
    InvalidCellError,
    InvalidShapeError,
    LineCraftError,
    SessionStateError,
)
from .pieces import (
    SHAPE_TEMPLATES,
    Color,
    RandomSource,
    Shape,
    ShapeGenerator,
    ShapeTemplate,
    SpecialBlock,
    SpecialType,
)
from .grid import (
    Cell,
    Grid,
    LineClearResult,
    PlacementResult,
    any_placeable,
    can_place,
    clear_lines,
    get_valid_placements,
    place_shape,
)
from .rules import Award, ScoreState, ScoringRules
from .core import (
    GameConfig,
    GameMode,
    GameSession,
    GameState,
    TurnResult,
    anchor_from_pointer,
    generate_shape_set,
)

__all__ = [
    "LineCraftError",
    "InvalidShapeError",
    "InvalidCellError",
    "IllegalPlacementError",
    "SessionStateError",
    "SHAPE_TEMPLATES",
    "Color",
    "RandomSource",
    "Shape",
    "ShapeGenerator",
    "ShapeTemplate",
    "SpecialBlock",
    "SpecialType",
    "Cell",
    "Grid",
    "LineClearResult",
    "PlacementResult",
    "any_placeable",
    "can_place",
    "clear_lines",
    "get_valid_placements",
    "place_shape",
    "Award",
    "ScoreState",
    "ScoringRules",
    "GameConfig",
    "GameMode",
    "GameSession",
    "GameState",
    "TurnResult",
    "anchor_from_pointer",
    "generate_shape_set",
]
