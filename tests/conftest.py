"""Shared fixtures and level payloads for the test suite."""

import copy

import pytest

MINIMAL_LEVEL = {
    "id": 101,
    "name": "Fixture: Minimal Valid",
    "gridSize": {"width": 12, "height": 10},
    "snake": [{"x": 5, "y": 6}, {"x": 4, "y": 6}],
    "obstacles": [{"x": 2, "y": 2}],
    "food": [{"x": 8, "y": 5}],
    "exit": {"x": 11, "y": 8},
    "snakeDirection": "East",
    "totalFood": 1,
}


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def minimal_level() -> dict:
    """A fresh copy of the minimal valid level payload."""
    return copy.deepcopy(MINIMAL_LEVEL)
