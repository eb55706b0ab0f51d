"""
Tests for the level catalog and world generation.
"""

import pytest

from ..engine_core.goal import collect_all_then_goal, reach_goal
from ..engine_core.interpreter import run_to_completion
from ..engine_core.world import CollectibleKind, Position, World
from ..levels import (
    GRID_SIZE,
    LEVELS,
    Concept,
    generate_world,
    get_level,
    is_solvable,
    list_levels,
    reachable_cells,
)
from ..program import BlockType, Loop, Program
from ..program.blocks import down, right


class TestCatalog:
    """Tests for level definitions."""

    def test_fifteen_levels_in_order(self):
        levels = list_levels()
        assert [level.level_id for level in levels] == list(range(1, 16))
        assert len(LEVELS) == 15

    def test_unknown_level(self):
        assert get_level(0) is None
        assert get_level(99) is None

    def test_first_level(self, first_level):
        assert first_level.name == "First Steps"
        assert first_level.max_blocks == 4
        assert first_level.required_concept == Concept.SEQUENCE
        assert first_level.available_blocks == frozenset(
            {BlockType.UP, BlockType.DOWN, BlockType.LEFT, BlockType.RIGHT}
        )
        assert first_level.hints[1] == "Use 2 RIGHT arrows"

    def test_blocks_unlock_progressively(self):
        assert BlockType.LOOP not in get_level(3).available_blocks
        assert BlockType.LOOP in get_level(4).available_blocks
        assert BlockType.IF in get_level(8).available_blocks
        assert BlockType.BREAK in get_level(10).available_blocks
        assert BlockType.FUNCTION in get_level(11).available_blocks
        assert BlockType.WAIT in get_level(13).available_blocks
        assert BlockType.WAIT not in get_level(14).available_blocks

    def test_collectible_levels_require_collecting(self):
        for level in list_levels():
            if level.collectibles:
                assert level.goal is collect_all_then_goal, level.level_id
            else:
                assert level.goal is reach_goal, level.level_id

    def test_to_dict(self, loop_level):
        data = loop_level.to_dict()
        assert data["level_id"] == 4
        assert data["available_blocks"] == ["UP", "DOWN", "LEFT", "RIGHT", "LOOP"]
        assert data["required_concept"] == "loop"
        assert data["hints"][0] == "Use LOOP 4x with RIGHT inside"


class TestFixedLayouts:
    """Levels 1-6 always look the same."""

    def test_level_one(self, first_level):
        world = generate_world(first_level)
        assert world.grid_size == GRID_SIZE
        assert world.start == Position(1, 2)
        assert world.goal == Position(3, 2)
        assert world.walls == frozenset()

    def test_level_three_staircase(self):
        world = generate_world(get_level(3))
        assert world.walls == frozenset({Position(2, 1), Position(4, 3)})

    def test_level_six_maze(self):
        world = generate_world(get_level(6))
        assert len(world.walls) == 6
        assert Position(2, 0) in world.walls
        assert world.goal == Position(5, 5)

    @pytest.mark.parametrize("level_id", range(1, 7))
    def test_seed_ignored(self, level_id):
        level = get_level(level_id)
        assert generate_world(level, seed=1) == generate_world(level, seed=2)

    def test_level_one_hint_solves_it(self, first_level):
        world = generate_world(first_level)
        _, outcome = run_to_completion(Program(blocks=(right(), right())), world)
        assert outcome.success

    def test_level_four_loop_solves_it(self, loop_level):
        world = generate_world(loop_level)
        _, outcome = run_to_completion(Program(blocks=(Loop(4, (right(),)),)), world)
        assert outcome.success


class TestGeneratedLayouts:
    """Levels 7-15 are generated from a seed."""

    @pytest.mark.parametrize("level_id", range(1, 16))
    @pytest.mark.parametrize("seed", [0, 1, 42, 2024])
    def test_every_level_is_valid_and_solvable(self, level_id, seed):
        world = generate_world(get_level(level_id), seed=seed)
        assert isinstance(world, World)
        assert is_solvable(world)

    @pytest.mark.parametrize("level_id", range(7, 16))
    def test_same_seed_same_world(self, level_id):
        level = get_level(level_id)
        assert generate_world(level, seed=7) == generate_world(level, seed=7)

    def test_collectible_level_layout(self):
        level = get_level(13)
        world = generate_world(level, seed=5)

        assert world.start == Position(0, 0)
        assert world.goal == Position(5, 5)
        assert len(world.collectibles) == 5
        assert len(world.walls) == 8
        assert [c.kind for c in world.collectibles[:3]] == [
            CollectibleKind.COIN, CollectibleKind.GEM, CollectibleKind.KEY,
        ]

    def test_collectibles_avoid_start(self):
        for seed in range(20):
            world = generate_world(get_level(15), seed=seed)
            assert all(c.position != world.start for c in world.collectibles)

    def test_wall_count_for_collectible_levels(self):
        # min(8, 3 + level_id)
        assert len(generate_world(get_level(10), seed=3).walls) == 8
        assert generate_world(get_level(7), seed=3).walls == frozenset()
        assert generate_world(get_level(11), seed=3).walls == frozenset()

    def test_random_layout_halves(self):
        for seed in range(20):
            world = generate_world(get_level(9), seed=seed)
            assert world.start.x < GRID_SIZE // 2
            assert world.goal.x >= GRID_SIZE // 2
            assert 4 <= len(world.walls) <= 9


class TestReachability:
    """Tests for the flood fill used to reject unsolvable layouts."""

    def test_open_grid_fully_reachable(self, open_world):
        assert len(reachable_cells(open_world)) == 25

    def test_walled_off_goal(self):
        world = World(
            grid_size=3,
            start=Position(0, 0),
            goal=Position(2, 2),
            walls={Position(1, 2), Position(2, 1)},
        )
        assert not is_solvable(world)

    def test_reachable_path(self):
        world = generate_world(get_level(2))
        _, outcome = run_to_completion(
            Program(blocks=(right(), right(), right(), down(), down())),
            world,
        )
        assert outcome.final_position == Position(4, 3)
        assert outcome.success
