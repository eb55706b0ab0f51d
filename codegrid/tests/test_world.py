"""
Tests for the world model and per-run state.
"""

import pytest

from ..engine_core.world import (
    Collectible,
    CollectibleKind,
    CollectibleSet,
    Position,
    World,
)
from ..errors import CodegridError, WorldValidationError
from ..program.blocks import Direction


class TestPosition:
    """Tests for grid positions."""

    def test_step_directions(self):
        origin = Position(2, 2)
        assert origin.step(Direction.UP) == Position(2, 1)
        assert origin.step(Direction.DOWN) == Position(2, 3)
        assert origin.step(Direction.LEFT) == Position(1, 2)
        assert origin.step(Direction.RIGHT) == Position(3, 2)

    def test_str_and_tuple(self):
        assert str(Position(3, 4)) == "(3,4)"
        assert Position(3, 4).as_tuple() == (3, 4)


class TestWorldInvariants:
    """World construction rejects impossible layouts."""

    def test_valid_world(self, open_world):
        assert open_world.grid_size == 5
        assert open_world.walls == frozenset()

    def test_start_outside_grid(self):
        with pytest.raises(WorldValidationError) as exc_info:
            World(grid_size=5, start=Position(5, 0), goal=Position(4, 0))
        assert any("start" in e for e in exc_info.value.errors)

    def test_goal_on_wall(self):
        with pytest.raises(WorldValidationError) as exc_info:
            World(
                grid_size=5,
                start=Position(0, 0),
                goal=Position(4, 0),
                walls={Position(4, 0)},
            )
        assert any("goal" in e and "wall" in e for e in exc_info.value.errors)

    def test_start_and_goal_share_cell(self):
        with pytest.raises(WorldValidationError):
            World(grid_size=5, start=Position(1, 1), goal=Position(1, 1))

    def test_collectibles_must_not_overlap(self):
        with pytest.raises(WorldValidationError):
            World(
                grid_size=5,
                start=Position(0, 0),
                goal=Position(4, 0),
                collectibles=(
                    Collectible(Position(2, 2)),
                    Collectible(Position(2, 2), CollectibleKind.GEM),
                ),
            )

    def test_collectible_on_goal_rejected(self):
        with pytest.raises(WorldValidationError):
            World(
                grid_size=5,
                start=Position(0, 0),
                goal=Position(4, 0),
                collectibles=(Collectible(Position(4, 0)),),
            )

    def test_collectible_may_lie_on_start(self, item_on_start_world):
        assert item_on_start_world.collectibles[0].position == item_on_start_world.start

    def test_wall_outside_grid(self):
        with pytest.raises(WorldValidationError):
            World(
                grid_size=3,
                start=Position(0, 0),
                goal=Position(2, 2),
                walls={Position(3, 3)},
            )

    def test_validation_error_is_codegrid_error(self):
        with pytest.raises(CodegridError):
            World(grid_size=0, start=Position(0, 0), goal=Position(0, 0))

    def test_iterables_are_frozen(self):
        world = World(
            grid_size=5,
            start=Position(0, 0),
            goal=Position(4, 0),
            walls=[Position(2, 2)],
            collectibles=[Collectible(Position(1, 1))],
        )
        assert isinstance(world.walls, frozenset)
        assert isinstance(world.collectibles, tuple)


class TestPassability:
    """Tests for walls and grid edges."""

    def test_in_bounds(self, open_world):
        assert open_world.in_bounds(Position(0, 0))
        assert open_world.in_bounds(Position(4, 4))
        assert not open_world.in_bounds(Position(-1, 0))
        assert not open_world.in_bounds(Position(0, 5))

    def test_walls_are_not_passable(self, walled_world):
        assert walled_world.is_wall(Position(1, 0))
        assert not walled_world.is_passable(Position(1, 0))
        assert walled_world.is_passable(Position(0, 1))

    def test_edge_is_not_a_wall(self, open_world):
        outside = Position(0, -1)
        assert not open_world.is_wall(outside)
        assert not open_world.is_passable(outside)


class TestCollectibleSet:
    """Tests for per-run collected flags."""

    def test_fresh_set_has_nothing_collected(self, coin_world):
        items = coin_world.new_collectible_set()
        assert items.collected == [False, False]
        assert items.collected_count == 0
        assert not items.all_collected()

    def test_collect_marks_item(self, coin_world):
        items = coin_world.new_collectible_set()
        item = items.collect(Position(1, 0))
        assert item.kind == CollectibleKind.COIN
        assert items.snapshot() == (True, False)

    def test_collect_twice_returns_none(self, coin_world):
        items = coin_world.new_collectible_set()
        assert items.collect(Position(1, 0)) is not None
        assert items.collect(Position(1, 0)) is None
        assert items.collected_count == 1

    def test_collect_empty_cell(self, coin_world):
        items = coin_world.new_collectible_set()
        assert items.collect(Position(3, 3)) is None
        assert items.collectible_at(Position(3, 3)) is None

    def test_remaining(self, coin_world):
        items = coin_world.new_collectible_set()
        items.collect(Position(2, 0))
        assert [c.position for c in items.remaining()] == [Position(1, 0)]

    def test_each_run_gets_fresh_state(self, coin_world):
        first = coin_world.new_collectible_set()
        first.collect(Position(1, 0))
        second = coin_world.new_collectible_set()
        assert second.collected_count == 0

    def test_empty_set_is_all_collected(self):
        assert CollectibleSet(items=(), collected=[]).all_collected()
