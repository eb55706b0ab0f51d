"""
Pytest fixtures for Codegrid tests.
"""

import pytest

from ..engine_core.world import Collectible, CollectibleKind, Position, World
from ..levels import get_level


@pytest.fixture
def open_world() -> World:
    """5x5 grid, no walls, no items. Start (0,0), goal (4,0)."""
    return World(grid_size=5, start=Position(0, 0), goal=Position(4, 0))


@pytest.fixture
def item_on_start_world() -> World:
    """The open 5x5 grid with a coin lying on the start cell."""
    return World(
        grid_size=5,
        start=Position(0, 0),
        goal=Position(4, 0),
        collectibles=(Collectible(Position(0, 0), CollectibleKind.COIN),),
    )


@pytest.fixture
def coin_world() -> World:
    """5x5 grid with a coin at (1,0) and a gem at (2,0), on the way to the goal."""
    return World(
        grid_size=5,
        start=Position(0, 0),
        goal=Position(4, 0),
        collectibles=(
            Collectible(Position(1, 0), CollectibleKind.COIN),
            Collectible(Position(2, 0), CollectibleKind.GEM),
        ),
    )


@pytest.fixture
def walled_world() -> World:
    """5x5 grid with walls at (1,0) and (2,0), between the start and the goal."""
    return World(
        grid_size=5,
        start=Position(0, 0),
        goal=Position(4, 0),
        walls=frozenset({Position(1, 0), Position(2, 0)}),
    )


@pytest.fixture
def first_level():
    return get_level(1)


@pytest.fixture
def loop_level():
    return get_level(4)
