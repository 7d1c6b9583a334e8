"""Tests for building LevelDefinition export payloads."""

import json

import pytest

from engine.editor import apply_action, create_editor_state
from engine.export import (
    InvalidLevelIdError,
    build_level_export,
    build_level_payload,
    export_level_json,
)
from engine.level_id import UINT32_MAX
from models.editor import GridCell, PlaceEntity, SetDirection, SnakeSegment
from models.level import Difficulty, Direction, EntityType


def _make_cells(width: int, height: int) -> list[list[GridCell]]:
    """Helper to create an empty mutable grid of cells."""
    return [[GridCell(row=row, col=col) for col in range(width)] for row in range(height)]


def _tag(cells, row: int, col: int, entity: EntityType) -> None:
    cells[row][col] = GridCell(row=row, col=col, entity=entity)


def _build(cells, width, height, **overrides):
    kwargs = dict(
        level_id=123,
        name="Contract Level",
        difficulty=Difficulty.MEDIUM,
        width=width,
        height=height,
        cells=cells,
        snake_segments=[],
        direction=Direction.EAST,
    )
    kwargs.update(overrides)
    return build_level_payload(**kwargs)


class TestBuildLevelPayload:
    """Tests for build_level_payload()."""

    def test_contract_field_names_and_order(self):
        cells = _make_cells(3, 3)
        _tag(cells, 0, 0, EntityType.OBSTACLE)
        _tag(cells, 0, 1, EntityType.FOOD)
        _tag(cells, 0, 2, EntityType.FLOATING_FOOD)
        _tag(cells, 1, 0, EntityType.FALLING_FOOD)
        _tag(cells, 1, 1, EntityType.STONE)
        _tag(cells, 1, 2, EntityType.SPIKE)
        _tag(cells, 2, 0, EntityType.EXIT)

        payload = _build(
            cells, 3, 3,
            snake_segments=[SnakeSegment(row=2, col=2), SnakeSegment(row=2, col=1)],
            direction=Direction.WEST,
        ).to_wire()

        assert payload == {
            "id": 123,
            "name": "Contract Level",
            "difficulty": "medium",
            "gridSize": {"width": 3, "height": 3},
            "snake": [{"x": 2, "y": 2}, {"x": 1, "y": 2}],
            "obstacles": [{"x": 0, "y": 0}],
            "food": [{"x": 1, "y": 0}],
            "exit": {"x": 0, "y": 2},
            "snakeDirection": "West",
            "floatingFood": [{"x": 2, "y": 0}],
            "fallingFood": [{"x": 0, "y": 1}],
            "stones": [{"x": 1, "y": 1}],
            "spikes": [{"x": 2, "y": 1}],
            "totalFood": 3,
        }
        assert list(payload) == [
            "id", "name", "difficulty", "gridSize", "snake", "obstacles", "food",
            "exit", "snakeDirection", "floatingFood", "fallingFood", "stones",
            "spikes", "totalFood",
        ]

    def test_rejects_invalid_level_id(self):
        with pytest.raises(InvalidLevelIdError, match="id must be a uint32 number"):
            _build(_make_cells(1, 1), 1, 1, level_id=UINT32_MAX + 1)

    def test_rejects_missing_level_id(self):
        with pytest.raises(InvalidLevelIdError):
            _build(_make_cells(1, 1), 1, 1, level_id=None)

    def test_empty_snake_exports_empty_list(self):
        cells = _make_cells(2, 2)
        _tag(cells, 1, 1, EntityType.EXIT)
        payload = _build(cells, 2, 2)
        assert payload.snake == []
        assert payload.to_wire()["exit"] == {"x": 1, "y": 1}

    def test_missing_exit_is_null(self):
        payload = _build(_make_cells(2, 2), 2, 2, snake_segments=[SnakeSegment(row=0, col=0)])
        assert payload.to_wire()["exit"] is None

    def test_last_exit_wins(self):
        cells = _make_cells(3, 2)
        _tag(cells, 0, 0, EntityType.EXIT)
        _tag(cells, 1, 2, EntityType.EXIT)
        assert _build(cells, 3, 2).to_wire()["exit"] == {"x": 2, "y": 1}

    @pytest.mark.parametrize(
        "direction,expected",
        [("north", "North"), ("south", "South"), ("east", "East"), ("west", "West")],
    )
    def test_direction_capitalised(self, direction, expected):
        payload = _build(_make_cells(1, 1), 1, 1, direction=direction)
        assert payload.to_wire()["snakeDirection"] == expected

    def test_total_food_counts_all_food_kinds(self):
        cells = _make_cells(4, 1)
        _tag(cells, 0, 0, EntityType.FOOD)
        _tag(cells, 0, 1, EntityType.FLOATING_FOOD)
        _tag(cells, 0, 2, EntityType.FALLING_FOOD)
        _tag(cells, 0, 3, EntityType.FALLING_FOOD)
        payload = _build(cells, 4, 1)
        assert payload.total_food == 4
        assert payload.total_food == len(payload.food) + len(payload.floating_food) + len(payload.falling_food)

    def test_difficulty_omitted_when_unset(self):
        payload = _build(_make_cells(1, 1), 1, 1, difficulty=None).to_wire()
        assert "difficulty" not in payload
        assert "exitIsSolid" not in payload


class TestBuildLevelExport:
    """Tests for build_level_export() over editor state."""

    def test_export_from_editor_state(self):
        state = create_editor_state(5, 5, level_id=55, name="Workflow Level", difficulty=Difficulty.HARD)
        state = apply_action(state, PlaceEntity(row=0, col=0, entity=EntityType.SNAKE))
        state = apply_action(state, PlaceEntity(row=0, col=1, entity=EntityType.FOOD))
        state = apply_action(state, PlaceEntity(row=0, col=2, entity=EntityType.EXIT))
        state = apply_action(state, SetDirection(direction=Direction.NORTH))

        payload = build_level_export(state).to_wire()

        assert payload["id"] == 55
        assert payload["name"] == "Workflow Level"
        assert payload["difficulty"] == "hard"
        assert payload["gridSize"] == {"width": 5, "height": 5}
        assert payload["snake"] == [{"x": 0, "y": 0}]
        assert payload["food"] == [{"x": 1, "y": 0}]
        assert payload["exit"] == {"x": 2, "y": 0}
        assert payload["snakeDirection"] == "North"
        assert payload["totalFood"] == 1

    def test_overrides(self):
        state = create_editor_state(5, 5, level_id=55, name="Mine")
        payload = build_level_export(state, level_id=999999, name="Test Level", difficulty=Difficulty.EASY)
        assert (payload.id, payload.name, payload.difficulty) == (999999, "Test Level", Difficulty.EASY)


class TestExportLevelJson:
    """Tests for export_level_json()."""

    def test_stable_json_document(self):
        state = create_editor_state(5, 5, level_id=9, name="Json")
        text = export_level_json(build_level_export(state))
        assert text.endswith("\n")
        assert text.startswith('{\n  "id": 9,\n  "name": "Json",')
        assert json.loads(text)["totalFood"] == 0
