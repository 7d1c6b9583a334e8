"""Editor-side level file loading and projection into grid state.

Loading is all-or-nothing: a file either passes every check and becomes a
fresh ``EditorState``, or a ``LevelFileError`` is raised and the caller's
existing state is left alone.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from config import MAX_GRID_DIMENSION, MIN_GRID_DIMENSION
from engine.bounds import describe_out_of_bounds, find_out_of_bounds
from engine.level_id import is_valid_level_id
from models.editor import EditorState, GridCell, SnakeSegment
from models.level import (
    EDITOR_DIRECTIONS,
    POSITION_FIELDS,
    Difficulty,
    EntityType,
    LevelDefinition,
    SnakeDirection,
)


class LevelFileError(ValueError):
    """Base class for any reason a level file cannot be loaded."""


class MalformedJsonError(LevelFileError):
    """The file content is not valid JSON."""


class LevelFormatError(LevelFileError):
    """The JSON does not have the shape of a level."""


class LevelBoundsError(LevelFileError):
    """One or more positions fall outside the declared grid."""


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_level_shape(data: Any) -> dict[str, Any]:
    """Run the light structural checks the editor applies before loading.

    Returns:
        A shallow copy of ``data`` with ``snakeDirection`` normalised to its
        capitalised wire form.

    Raises:
        LevelFormatError: On the first structural problem found.
    """
    if not isinstance(data, dict):
        raise LevelFormatError("Invalid level format: expected a JSON object")
    if not is_valid_level_id(data.get("id")):
        raise LevelFormatError("Invalid level format: id must be a uint32 number")

    grid_size = data.get("gridSize")
    if (
        not isinstance(grid_size, dict)
        or not _is_int(grid_size.get("width"))
        or not _is_int(grid_size.get("height"))
    ):
        raise LevelFormatError("Invalid level format: missing or invalid gridSize")

    snake = data.get("snake")
    if not isinstance(snake, list) or len(snake) == 0:
        raise LevelFormatError("Invalid level format: missing or invalid snake")

    direction = data.get("snakeDirection")
    if not direction:
        raise LevelFormatError("Invalid level format: missing snakeDirection")
    if not isinstance(direction, str) or direction.capitalize() not in {d.value for d in SnakeDirection}:
        raise LevelFormatError(f"Invalid level format: unknown snakeDirection {direction!r}")

    width, height = grid_size["width"], grid_size["height"]
    if not (
        MIN_GRID_DIMENSION <= width <= MAX_GRID_DIMENSION
        and MIN_GRID_DIMENSION <= height <= MAX_GRID_DIMENSION
    ):
        raise LevelFormatError(
            f"Invalid grid dimensions: width and height must be between "
            f"{MIN_GRID_DIMENSION} and {MAX_GRID_DIMENSION}"
        )

    return {**data, "snakeDirection": direction.capitalize()}


def _check_positions(data: dict[str, Any]) -> None:
    """Make sure every position has integer x and y before the bounds pass."""
    fields = ["snake", *(name for name, _ in POSITION_FIELDS)]
    for field in fields:
        value = data.get(field)
        if value is None:
            continue
        if not isinstance(value, list):
            raise LevelFormatError(f"Invalid level format: {field} must be a list of positions")
        for index, position in enumerate(value):
            if not isinstance(position, dict) or not (_is_int(position.get("x")) and _is_int(position.get("y"))):
                raise LevelFormatError(f"Invalid level format: invalid position at {field}[{index}]")
    exit_position = data.get("exit")
    if exit_position is not None and (
        not isinstance(exit_position, dict)
        or not (_is_int(exit_position.get("x")) and _is_int(exit_position.get("y")))
    ):
        raise LevelFormatError("Invalid level format: invalid exit position")


def parse_level_file(text: str) -> LevelDefinition:
    """Parse and validate level file text.

    Raises:
        MalformedJsonError: If the text is not JSON.
        LevelFormatError: If the structure is not a loadable level.
        LevelBoundsError: If any position lies outside the grid; the message
            lists every offending position.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedJsonError(f"Malformed JSON: {e.msg}") from e
    except RecursionError as e:
        raise MalformedJsonError("Malformed JSON: nesting too deep") from e

    data = check_level_shape(raw)
    _check_positions(data)

    offenders = find_out_of_bounds(data)
    if offenders:
        size = data["gridSize"]
        raise LevelBoundsError(describe_out_of_bounds(size["width"], size["height"], offenders))

    # A stored totalFood is never trusted; it is recomputed on export.
    data.pop("totalFood", None)
    try:
        return LevelDefinition.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise LevelFormatError(f"Invalid level format: {location}: {first['msg']}") from e


def load_level_file(path: str | Path) -> LevelDefinition:
    """Read a UTF-8 level file from disk and parse it."""
    return parse_level_file(Path(path).read_text(encoding="utf-8"))


def project_level(level: LevelDefinition) -> EditorState:
    """Turn a validated level into a fresh editor state.

    Snake segments keep their head-first order and the head gets index 0.
    Snake cells take precedence over any other entity listed at the same
    position.
    """
    width, height = level.grid_size.width, level.grid_size.height
    entities: dict[tuple[int, int], EntityType] = {}

    for wire_name, entity in POSITION_FIELDS:
        for position in level.positions(wire_name):
            entities[(position.y, position.x)] = entity
    if level.exit is not None:
        entities[(level.exit.y, level.exit.x)] = EntityType.EXIT

    segments: list[SnakeSegment] = []
    segment_index: dict[tuple[int, int], int] = {}
    for position in level.snake:
        key = (position.y, position.x)
        if key in segment_index:
            continue
        segment_index[key] = len(segments)
        segments.append(SnakeSegment(row=position.y, col=position.x))

    cells = []
    for row in range(height):
        row_cells = []
        for col in range(width):
            index = segment_index.get((row, col))
            if index is not None:
                row_cells.append(GridCell(
                    row=row,
                    col=col,
                    entity=EntityType.SNAKE,
                    is_snake_segment=True,
                    snake_segment_index=index,
                ))
            else:
                row_cells.append(GridCell(row=row, col=col, entity=entities.get((row, col))))
        cells.append(tuple(row_cells))

    return EditorState(
        width=width,
        height=height,
        cells=tuple(cells),
        snake_segments=tuple(segments),
        direction=EDITOR_DIRECTIONS[level.snake_direction],
        level_id=level.id,
        name=level.name,
        difficulty=level.difficulty or Difficulty.MEDIUM,
    )
