"""Build canonical LevelDefinition payloads from editor state."""

from __future__ import annotations

import json
from collections.abc import Sequence

from engine.level_id import is_valid_level_id
from models.editor import EditorState, GridCell, SnakeSegment
from models.level import (
    WIRE_DIRECTIONS,
    Difficulty,
    Direction,
    EntityType,
    GridSize,
    LevelDefinition,
    Position,
)


class InvalidLevelIdError(ValueError):
    """Raised when a level id is not an unsigned 32-bit integer."""


INVALID_ID_MESSAGE = "Invalid level format: id must be a uint32 number"

# Wire array each non-snake, non-exit entity is exported into.
ENTITY_BUCKETS: dict[EntityType, str] = {
    EntityType.OBSTACLE: "obstacles",
    EntityType.FOOD: "food",
    EntityType.STONE: "stones",
    EntityType.SPIKE: "spikes",
    EntityType.FLOATING_FOOD: "floatingFood",
    EntityType.FALLING_FOOD: "fallingFood",
}


def count_total_food(food: int, floating_food: int, falling_food: int) -> int:
    """The derived ``totalFood`` value; never taken from input."""
    return food + floating_food + falling_food


def build_level_payload(
    *,
    level_id: int,
    name: str,
    difficulty: Difficulty | None,
    width: int,
    height: int,
    cells: Sequence[Sequence[GridCell | None]],
    snake_segments: Sequence[SnakeSegment],
    direction: Direction,
) -> LevelDefinition:
    """Convert grid cells and snake segments into a LevelDefinition.

    Cells are scanned row-major. If several exit cells exist the last one
    scanned wins; no exit yields ``exit=None``.

    Raises:
        InvalidLevelIdError: If ``level_id`` is not a valid uint32.
    """
    if not is_valid_level_id(level_id):
        raise InvalidLevelIdError(INVALID_ID_MESSAGE)

    buckets: dict[str, list[Position]] = {field: [] for field in ENTITY_BUCKETS.values()}
    exit_position: Position | None = None

    for row in range(height):
        row_cells = cells[row] if row < len(cells) else ()
        for col in range(width):
            cell = row_cells[col] if col < len(row_cells) else None
            if cell is None or cell.entity is None:
                continue
            position = Position(x=col, y=row)
            if cell.entity == EntityType.EXIT:
                exit_position = position
            elif cell.entity in ENTITY_BUCKETS:
                buckets[ENTITY_BUCKETS[cell.entity]].append(position)

    snake = [Position(x=segment.col, y=segment.row) for segment in snake_segments]

    return LevelDefinition(
        id=level_id,
        name=name,
        difficulty=difficulty,
        grid_size=GridSize(width=width, height=height),
        snake=snake,
        obstacles=buckets["obstacles"],
        food=buckets["food"],
        exit=exit_position,
        snake_direction=WIRE_DIRECTIONS[Direction(direction)],
        floating_food=buckets["floatingFood"],
        falling_food=buckets["fallingFood"],
        stones=buckets["stones"],
        spikes=buckets["spikes"],
        total_food=count_total_food(
            len(buckets["food"]),
            len(buckets["floatingFood"]),
            len(buckets["fallingFood"]),
        ),
    )


def build_level_export(
    state: EditorState,
    level_id: int | None = None,
    name: str | None = None,
    difficulty: Difficulty | None = None,
) -> LevelDefinition:
    """Export an editor state, optionally overriding id, name, or difficulty."""
    resolved_id = state.level_id if level_id is None else level_id
    return build_level_payload(
        level_id=resolved_id,
        name=state.name if name is None else name,
        difficulty=state.difficulty if difficulty is None else difficulty,
        width=state.width,
        height=state.height,
        cells=state.cells,
        snake_segments=state.snake_segments,
        direction=state.direction,
    )


def export_level_json(level: LevelDefinition) -> str:
    """Render the file format: canonical key order, indented, newline-terminated."""
    return json.dumps(level.to_wire(), indent=2, ensure_ascii=False) + "\n"
