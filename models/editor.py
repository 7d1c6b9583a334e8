"""In-memory editor state models: grid cells, snake segments, and actions."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from config import DEFAULT_GRID_HEIGHT, DEFAULT_GRID_WIDTH
from models.level import Difficulty, Direction, EntityType


class GridCell(BaseModel):
    """A single cell of the editor grid."""
    model_config = ConfigDict(frozen=True)

    row: int
    col: int
    entity: EntityType | None = None
    is_snake_segment: bool = False
    snake_segment_index: int | None = None   # 0 = head


class SnakeSegment(BaseModel):
    """One snake segment in grid coordinates."""
    model_config = ConfigDict(frozen=True)

    row: int
    col: int


class EditorState(BaseModel):
    """Immutable snapshot of everything the editor is working on.

    ``cells`` is indexed as cells[row][col]. ``snake_segments`` is the
    authoritative head-to-tail order; cells tagged ``snake`` mirror it.
    """
    model_config = ConfigDict(frozen=True)

    width: int = DEFAULT_GRID_WIDTH
    height: int = DEFAULT_GRID_HEIGHT
    cells: tuple[tuple[GridCell, ...], ...] = ()
    snake_segments: tuple[SnakeSegment, ...] = ()
    direction: Direction = Direction.EAST
    level_id: int | None = None
    name: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM

    def cell(self, row: int, col: int) -> GridCell:
        """Return the cell at (row, col).

        Raises:
            ValueError: If the coordinates fall outside the grid.
        """
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise ValueError(f"Cell ({row}, {col}) is outside the {self.width}x{self.height} grid")
        return self.cells[row][col]


class PlaceEntity(BaseModel):
    """Place the selected tool's entity on a cell (plain click)."""
    kind: Literal["place"] = "place"
    row: int
    col: int
    entity: EntityType


class RemoveEntity(BaseModel):
    """Clear whatever occupies a cell (shift-click)."""
    kind: Literal["remove"] = "remove"
    row: int
    col: int


class SetDirection(BaseModel):
    """Change the snake's starting direction."""
    kind: Literal["direction"] = "direction"
    direction: Direction


class ResizeGrid(BaseModel):
    """Start over on an empty grid of a new size."""
    kind: Literal["resize"] = "resize"
    width: int
    height: int


class ClearGrid(BaseModel):
    """Remove every entity and the snake, keeping the grid size."""
    kind: Literal["clear"] = "clear"


EditorAction = PlaceEntity | RemoveEntity | SetDirection | ResizeGrid | ClearGrid
