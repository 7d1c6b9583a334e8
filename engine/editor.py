"""Editor state reducer and undo/redo history.

All grid edits go through ``apply_action(state, action) -> new_state``. States
are immutable, so the history simply keeps references to previous snapshots.
"""

from __future__ import annotations

from engine.level_file import parse_level_file, project_level
from engine.level_id import generate_level_id
from models.editor import (
    ClearGrid,
    EditorAction,
    EditorState,
    GridCell,
    PlaceEntity,
    RemoveEntity,
    ResizeGrid,
    SetDirection,
    SnakeSegment,
)
from models.level import Difficulty, Direction, EntityType

FOOD_ENTITIES = (EntityType.FOOD, EntityType.FLOATING_FOOD, EntityType.FALLING_FOOD)


def _empty_cells(width: int, height: int) -> tuple[tuple[GridCell, ...], ...]:
    return tuple(
        tuple(GridCell(row=row, col=col) for col in range(width))
        for row in range(height)
    )


def create_editor_state(
    width: int,
    height: int,
    level_id: int | None = None,
    name: str = "",
    difficulty: Difficulty = Difficulty.MEDIUM,
) -> EditorState:
    """Create an empty editor state with a freshly generated level id."""
    if width < 1 or height < 1:
        raise ValueError(f"Grid must be at least 1x1, got {width}x{height}")
    return EditorState(
        width=width,
        height=height,
        cells=_empty_cells(width, height),
        level_id=generate_level_id() if level_id is None else level_id,
        name=name,
        difficulty=difficulty,
    )


def _rebuild(
    state: EditorState,
    entities: dict[tuple[int, int], EntityType],
    segments: list[SnakeSegment],
) -> EditorState:
    """Rebuild cells from an entity map and the ordered snake segments.

    Snake cells are derived from ``segments`` so segment indices can never
    drift from the authoritative order.
    """
    index_of = {(s.row, s.col): i for i, s in enumerate(segments)}
    cells = []
    for row in range(state.height):
        row_cells = []
        for col in range(state.width):
            index = index_of.get((row, col))
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

    # Clearing the last segment resets the direction for the next snake.
    direction = Direction.EAST if state.snake_segments and not segments else state.direction
    return state.model_copy(update={
        "cells": tuple(cells),
        "snake_segments": tuple(segments),
        "direction": direction,
    })


def _entity_map(state: EditorState) -> dict[tuple[int, int], EntityType]:
    """Non-snake entities keyed by (row, col)."""
    return {
        (cell.row, cell.col): cell.entity
        for row in state.cells
        for cell in row
        if cell.entity is not None and not cell.is_snake_segment
    }


def _place(state: EditorState, action: PlaceEntity) -> EditorState:
    cell = state.cell(action.row, action.col)
    key = (action.row, action.col)
    entities = _entity_map(state)
    segments = list(state.snake_segments)

    if action.entity == EntityType.SNAKE:
        if cell.is_snake_segment:
            return state
        entities.pop(key, None)
        segments.append(SnakeSegment(row=action.row, col=action.col))
        return _rebuild(state, entities, segments)

    if cell.entity == action.entity:
        return state

    if cell.is_snake_segment:
        segments = [s for s in segments if (s.row, s.col) != key]
    if action.entity == EntityType.EXIT:
        entities = {k: v for k, v in entities.items() if v != EntityType.EXIT}
    entities[key] = action.entity
    return _rebuild(state, entities, segments)


def _remove(state: EditorState, action: RemoveEntity) -> EditorState:
    cell = state.cell(action.row, action.col)
    if cell.entity is None:
        return state
    key = (action.row, action.col)
    entities = _entity_map(state)
    entities.pop(key, None)
    segments = [s for s in state.snake_segments if (s.row, s.col) != key]
    return _rebuild(state, entities, segments)


def apply_action(state: EditorState, action: EditorAction) -> EditorState:
    """Apply one edit and return the resulting state.

    Returns the same object when the action changes nothing, which lets
    the history skip recording no-ops.

    Raises:
        ValueError: If the action targets a cell outside the grid.
    """
    if isinstance(action, PlaceEntity):
        return _place(state, action)
    if isinstance(action, RemoveEntity):
        return _remove(state, action)
    if isinstance(action, SetDirection):
        if action.direction == state.direction:
            return state
        return state.model_copy(update={"direction": action.direction})
    if isinstance(action, ResizeGrid):
        return create_editor_state(
            action.width,
            action.height,
            level_id=state.level_id,
            name=state.name,
            difficulty=state.difficulty,
        )
    if isinstance(action, ClearGrid):
        return _rebuild(state, {}, [])
    raise TypeError(f"Unknown editor action: {action!r}")


def level_warnings(state: EditorState) -> list[str]:
    """Warnings shown before saving; none of them block an export."""
    warnings = []
    if not state.snake_segments:
        warnings.append("No snake placed - level cannot be played")
    entities = [cell.entity for row in state.cells for cell in row]
    if EntityType.EXIT not in entities:
        warnings.append("No exit placed - level cannot be completed")
    if not any(entity in FOOD_ENTITIES for entity in entities):
        warnings.append("No food placed - level may not be completable")
    return warnings


class EditorHistory:
    """Undo/redo stacks of immutable editor snapshots."""

    def __init__(self, state: EditorState) -> None:
        self.present = state
        self._undo: list[EditorState] = []
        self._redo: list[EditorState] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def dispatch(self, action: EditorAction) -> EditorState:
        """Apply an action, recording it unless it was a no-op.

        A recorded action clears the redo stack.
        """
        new_state = apply_action(self.present, action)
        if new_state is not self.present:
            self._undo.append(self.present)
            self._redo.clear()
            self.present = new_state
        return self.present

    def undo(self) -> EditorState:
        if self._undo:
            self._redo.append(self.present)
            self.present = self._undo.pop()
        return self.present

    def redo(self) -> EditorState:
        if self._redo:
            self._undo.append(self.present)
            self.present = self._redo.pop()
        return self.present

    def load(self, state: EditorState) -> EditorState:
        """Replace the present state and forget all history."""
        self.present = state
        self._undo.clear()
        self._redo.clear()
        return self.present

    def load_level_text(self, text: str) -> EditorState:
        """Load a level file's text into the history.

        The file is fully parsed and validated before anything changes, so
        a ``LevelFileError`` leaves the present state and both stacks as
        they were.
        """
        return self.load(project_level(parse_level_file(text)))
