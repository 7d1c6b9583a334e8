"""LevelDefinition wire models for the gSnake editor."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EntityType(str, Enum):
    """Entity tags a grid cell can carry."""
    SNAKE = "snake"
    OBSTACLE = "obstacle"
    FOOD = "food"
    EXIT = "exit"
    STONE = "stone"
    SPIKE = "spike"
    FLOATING_FOOD = "floating-food"
    FALLING_FOOD = "falling-food"


class Direction(str, Enum):
    """Editor-internal snake direction (lowercase)."""
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"


class SnakeDirection(str, Enum):
    """Wire form of the snake direction (capitalised)."""
    NORTH = "North"
    SOUTH = "South"
    EAST = "East"
    WEST = "West"


class Difficulty(str, Enum):
    """Optional difficulty label carried by a level."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


WIRE_DIRECTIONS: dict[Direction, SnakeDirection] = {
    Direction.NORTH: SnakeDirection.NORTH,
    Direction.SOUTH: SnakeDirection.SOUTH,
    Direction.EAST: SnakeDirection.EAST,
    Direction.WEST: SnakeDirection.WEST,
}
EDITOR_DIRECTIONS: dict[SnakeDirection, Direction] = {
    wire: editor for editor, wire in WIRE_DIRECTIONS.items()
}


class Position(BaseModel):
    """A grid coordinate; x is the column, y the row."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    x: int
    y: int


class GridSize(BaseModel):
    """Declared grid dimensions of a level."""
    model_config = ConfigDict(extra="forbid")

    width: int
    height: int


# Position arrays in the order they appear on the wire, paired with the
# entity each one holds. The snake and exit are handled separately.
POSITION_FIELDS: tuple[tuple[str, EntityType], ...] = (
    ("obstacles", EntityType.OBSTACLE),
    ("food", EntityType.FOOD),
    ("floatingFood", EntityType.FLOATING_FOOD),
    ("fallingFood", EntityType.FALLING_FOOD),
    ("stones", EntityType.STONE),
    ("spikes", EntityType.SPIKE),
)


class LevelDefinition(BaseModel):
    """The canonical wire/file representation of one level.

    Field declaration order is the serialisation order. Optional arrays that
    are absent on the wire default to empty lists.
    """
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: int
    name: str
    difficulty: Difficulty | None = None
    grid_size: GridSize = Field(alias="gridSize")
    snake: list[Position]
    obstacles: list[Position] = []
    food: list[Position] = []
    exit: Position | None = None
    snake_direction: SnakeDirection = Field(alias="snakeDirection")
    floating_food: list[Position] = Field(default=[], alias="floatingFood")
    falling_food: list[Position] = Field(default=[], alias="fallingFood")
    stones: list[Position] = []
    spikes: list[Position] = []
    total_food: int = Field(default=0, alias="totalFood")
    exit_is_solid: bool | None = Field(default=None, alias="exitIsSolid")

    def positions(self, wire_name: str) -> list[Position]:
        """Return a position array by its wire name (e.g. ``floatingFood``)."""
        for name, field in type(self).model_fields.items():
            if (field.alias or name) == wire_name:
                return getattr(self, name)
        raise KeyError(wire_name)

    def to_wire(self) -> dict:
        """Serialise to the wire dict, omitting unset optional scalars."""
        data = self.model_dump(mode="json", by_alias=True)
        if self.difficulty is None:
            data.pop("difficulty")
        if self.exit_is_solid is None:
            data.pop("exitIsSolid")
        return data


class ValidationDetail(BaseModel):
    """One field-addressable validation failure."""
    field: str
    keyword: str
    message: str
