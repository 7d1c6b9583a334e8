"""Coordinate-bounds checks that a structural schema cannot express.

Every position a level references must satisfy 0 <= x < width and
0 <= y < height. Both the HTTP validator and the editor's file loader use
``find_out_of_bounds`` so they always agree on which positions fail.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, NamedTuple

from models.level import ValidationDetail

# Position arrays checked before and after the exit, in reporting order.
LEADING_ARRAYS = ("snake", "obstacles", "food")
TRAILING_ARRAYS = ("floatingFood", "fallingFood", "stones", "spikes")


class OutOfBoundsPosition(NamedTuple):
    """A position that falls outside the declared grid."""
    field: str             # Wire array name, or "exit"
    index: int | None      # Index within the array; None for exit
    x: int
    y: int

    @property
    def label(self) -> str:
        return self.field if self.index is None else f"{self.field}[{self.index}]"

    @property
    def path(self) -> str:
        return self.field if self.index is None else f"{self.field}.{self.index}"


def iter_positions(level: Mapping[str, Any]) -> Iterator[tuple[str, int | None, Mapping[str, Any]]]:
    """Yield (field, index, position) for every position in a wire payload.

    Absent arrays are treated as empty and a null exit is skipped.
    """
    for field in LEADING_ARRAYS:
        for index, position in enumerate(level.get(field) or []):
            yield field, index, position
    exit_position = level.get("exit")
    if exit_position is not None:
        yield "exit", None, exit_position
    for field in TRAILING_ARRAYS:
        for index, position in enumerate(level.get(field) or []):
            yield field, index, position


def _in_range(value: int, limit: int) -> bool:
    return 0 <= value < limit


def find_out_of_bounds(level: Mapping[str, Any]) -> list[OutOfBoundsPosition]:
    """List every position outside the level's ``gridSize``."""
    width = level["gridSize"]["width"]
    height = level["gridSize"]["height"]
    offenders = []
    for field, index, position in iter_positions(level):
        x, y = position["x"], position["y"]
        if not (_in_range(x, width) and _in_range(y, height)):
            offenders.append(OutOfBoundsPosition(field, index, x, y))
    return offenders


def _axis_details(path: str, axis: str, value: int, limit: int, dimension: str) -> list[ValidationDetail]:
    if value < 0:
        return [ValidationDetail(
            field=f"{path}.{axis}",
            keyword="minimum",
            message="must be >= 0",
        )]
    if value >= limit:
        return [ValidationDetail(
            field=f"{path}.{axis}",
            keyword="maximum",
            message=f"must be less than gridSize.{dimension} ({limit})",
        )]
    return []


def validate_coordinate_bounds(level: Mapping[str, Any]) -> list[ValidationDetail]:
    """Report every out-of-bounds axis as a field detail.

    The payload is assumed to be structurally valid. Violations are all
    collected; the result is empty when every position fits the grid.

    Returns:
        Details shaped like schema errors, e.g. field ``food.0.x`` with
        keyword ``minimum`` or ``maximum``.
    """
    width = level["gridSize"]["width"]
    height = level["gridSize"]["height"]
    details: list[ValidationDetail] = []
    for offender in find_out_of_bounds(level):
        details.extend(_axis_details(offender.path, "x", offender.x, width, "width"))
        details.extend(_axis_details(offender.path, "y", offender.y, height, "height"))
    return details


def describe_out_of_bounds(width: int, height: int, offenders: list[OutOfBoundsPosition]) -> str:
    """Build the editor's single human-readable rejection message."""
    listed = ", ".join(f"{o.label} at ({o.x}, {o.y})" for o in offenders)
    return f"Unsupported out-of-bounds coordinates for grid {width}x{height}: {listed}"
