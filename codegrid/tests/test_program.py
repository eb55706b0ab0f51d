"""
Tests for block programs: structure, validation, serialization and the builder.
"""

import json

import pytest

from ..errors import BlockBudgetExceeded, ProgramValidationError
from ..program import (
    BlockType,
    Break,
    Collect,
    Condition,
    Direction,
    Function,
    If,
    Loop,
    Move,
    Program,
    ProgramBuilder,
    Wait,
    dumps_program,
    loads_program,
    new_block,
    parse_program,
    program_to_data,
    validate_for_level,
    validate_program,
    walk,
)
from ..program.blocks import MAX_NESTING_DEPTH, right, up


def nested_move(depth):
    """A RIGHT block wrapped in Functions so it sits at the given depth."""
    block = right()
    for _ in range(depth - 1):
        block = Function((block,))
    return block


def nested_move_data(depth):
    data = {"type": "RIGHT"}
    for _ in range(depth - 1):
        data = {"type": "FUNCTION", "children": [data]}
    return data


class TestProgramStructure:
    """Tests for the block tree."""

    def test_top_level_count_ignores_children(self):
        program = Program(blocks=(Loop(4, (right(), up(), right())), right()))
        assert program.top_level_count == 2
        assert program.total_count() == 5

    def test_walk_paths(self):
        program = Program(blocks=(Wait(), If(Condition.ITEM_HERE, (Collect(),))))
        assert [path for path, _ in walk(program.blocks)] == [(0,), (1,), (1, 0)]

    def test_block_types(self):
        program = Program(blocks=(Loop(2, (Function((Break(),)),)),))
        assert program.block_types() == {BlockType.LOOP, BlockType.FUNCTION, BlockType.BREAK}

    def test_blocks_are_immutable(self):
        loop = Loop(3, [right()])
        assert isinstance(loop.body, tuple)
        with pytest.raises(Exception):
            loop.iterations = 5

    def test_reused_block_value_is_safe(self):
        step = right()
        program = Program(blocks=(step, Loop(2, (step,))))
        assert program.total_count() == 3

    def test_move_block_type(self):
        assert Move(Direction.LEFT).block_type == BlockType.LEFT
        assert BlockType.LOOP.is_container
        assert not BlockType.WAIT.is_container


class TestValidation:
    """Tests for validate_program."""

    def test_valid_program(self):
        result = validate_program(Program(blocks=(Loop(4, (right(),)),)))
        assert result.valid
        assert result.errors == []

    def test_loop_count_range(self):
        for bad in (0, 1, 7):
            result = validate_program(Program(blocks=(Loop(bad, (right(),)),)))
            assert not result.valid, bad
        for good in range(2, 7):
            assert validate_program(Program(blocks=(Loop(good, (right(),)),))).valid

    def test_loop_count_must_be_int(self):
        result = validate_program(Program(blocks=(Loop(True, (right(),)),)))
        assert not result.valid

    def test_unknown_condition(self):
        result = validate_program(Program(blocks=(If("SOMETIMES", (right(),)),)))
        assert not result.valid
        assert "unknown condition" in result.errors[0]

    def test_non_block_child(self):
        result = validate_program(Program(blocks=(Loop(2, ("RIGHT",)),)))
        assert not result.valid
        assert "not a block" in result.errors[0]

    def test_empty_function_name(self):
        result = validate_program(Program(blocks=(Function((right(),), name=""),)))
        assert not result.valid

    def test_nested_errors_are_located(self):
        result = validate_program(Program(blocks=(Wait(), Loop(2, (Loop(9, ()),)))))
        assert result.errors[0].startswith("Loop 1/0")

    def test_nesting_depth_limit(self):
        assert validate_program(Program(blocks=(nested_move(MAX_NESTING_DEPTH),))).valid

        result = validate_program(Program(blocks=(nested_move(MAX_NESTING_DEPTH + 1),)))
        assert not result.valid
        assert "nested deeper than" in result.errors[0]

    def test_very_deep_program_is_rejected(self):
        result = validate_program(Program(blocks=(nested_move(500),)))
        assert not result.valid
        assert len(result.errors) == 1

    def test_budget_counts_top_level_only(self):
        nested = Program(blocks=(Loop(6, (right(), right(), right(), right(), right())),))
        assert validate_program(nested, max_blocks=1).valid

        flat = Program(blocks=(right(), right()))
        result = validate_program(flat, max_blocks=1)
        assert not result.valid

    def test_palette(self):
        program = Program(blocks=(Loop(2, (Collect(),)),))
        result = validate_program(
            program, available_blocks=[BlockType.LOOP, BlockType.RIGHT]
        )
        assert not result.valid
        assert "COLLECT" in result.errors[0]

    def test_warnings(self):
        assert validate_program(Program()).warnings
        assert validate_program(Program(blocks=(Loop(2, ()),))).warnings

    def test_raise_if_invalid(self):
        with pytest.raises(ProgramValidationError):
            validate_program(Program(blocks=(Loop(1, ()),))).raise_if_invalid()

    def test_validate_for_level(self, first_level, loop_level):
        program = Program(blocks=(Loop(4, (right(),)),))
        assert not validate_for_level(program, first_level).valid
        assert validate_for_level(program, loop_level).valid


class TestSerialization:
    """Tests for the JSON program format."""

    def test_parse_program(self):
        program = parse_program([
            {"type": "RIGHT"},
            {"type": "LOOP", "value": 4, "children": [{"type": "UP"}]},
            {"type": "IF", "condition": "ITEM_HERE", "children": [{"type": "COLLECT"}]},
            {"type": "FUNCTION", "name": "StepRight", "children": [{"type": "RIGHT"}]},
            {"type": "WAIT"},
            {"type": "BREAK"},
        ])

        assert program.blocks[0] == Move(Direction.RIGHT)
        assert program.blocks[1] == Loop(4, (Move(Direction.UP),))
        assert program.blocks[2] == If(Condition.ITEM_HERE, (Collect(),))
        assert program.blocks[3].name == "StepRight"
        assert program.blocks[4] == Wait()
        assert program.blocks[5] == Break()

    def test_type_is_case_insensitive(self):
        program = parse_program([{"type": "right"}, {"type": "if", "condition": "wall_ahead"}])
        assert program.blocks[1].condition == Condition.WALL_AHEAD

    def test_function_name_defaults(self):
        program = parse_program([{"type": "FUNCTION", "children": []}])
        assert program.blocks[0].name == "MyFunction"

    def test_unknown_type(self):
        with pytest.raises(ProgramValidationError) as exc_info:
            parse_program([{"type": "JUMP"}])
        assert "unknown block type" in exc_info.value.errors[0]

    def test_loop_without_value(self):
        with pytest.raises(ProgramValidationError):
            parse_program([{"type": "LOOP", "children": []}])

    def test_bad_condition(self):
        with pytest.raises(ProgramValidationError):
            parse_program([{"type": "IF", "condition": "RAINING"}])

    def test_collects_all_errors(self):
        with pytest.raises(ProgramValidationError) as exc_info:
            parse_program([{"type": "JUMP"}, {"type": "RIGHT"}, {}])
        assert len(exc_info.value.errors) == 2

    def test_not_a_list(self):
        with pytest.raises(ProgramValidationError):
            parse_program({"type": "RIGHT"})

    def test_nested_error_path(self):
        with pytest.raises(ProgramValidationError) as exc_info:
            parse_program([{"type": "LOOP", "value": 2, "children": [{"type": "FLY"}]}])
        assert exc_info.value.errors[0].startswith("Block 0/0")

    def test_nesting_depth_limit(self):
        program = parse_program([nested_move_data(MAX_NESTING_DEPTH)])
        assert program.total_count() == MAX_NESTING_DEPTH

        with pytest.raises(ProgramValidationError) as exc_info:
            parse_program([nested_move_data(600)])
        assert len(exc_info.value.errors) == 1
        assert "nested deeper than" in exc_info.value.errors[0]

    def test_to_data(self):
        program = Program(blocks=(Loop(3, (right(),)), If(Condition.GOAL_AHEAD, ())))
        assert program_to_data(program) == [
            {"type": "LOOP", "value": 3, "children": [{"type": "RIGHT"}]},
            {"type": "IF", "condition": "GOAL_AHEAD", "children": []},
        ]

    def test_loads_accepts_wrapped_program(self):
        text = json.dumps({"program": [{"type": "DOWN"}]})
        assert loads_program(text).blocks == (Move(Direction.DOWN),)

    def test_loads_invalid_json(self):
        with pytest.raises(ProgramValidationError):
            loads_program("[{")

    def test_dumps_loads(self):
        program = Program(blocks=(Function((Loop(2, (Wait(),)),), name="Nap"),))
        assert loads_program(dumps_program(program)) == program


class TestProgramBuilder:
    """Tests for editor-side program assembly."""

    def test_new_block_defaults(self):
        assert new_block(BlockType.LOOP) == Loop(2)
        assert new_block(BlockType.IF) == If(Condition.ITEM_HERE)
        assert new_block(BlockType.FUNCTION).name == "MyFunction"
        assert new_block(BlockType.UP) == Move(Direction.UP)

    def test_build_nested_program(self):
        builder = ProgramBuilder(max_blocks=8)
        loop_idx = builder.add(BlockType.LOOP)
        builder.configure((loop_idx,), iterations=4)
        builder.add_child((loop_idx,), BlockType.RIGHT)

        program = builder.build()
        assert program.blocks == (Loop(4, (Move(Direction.RIGHT),)),)

    def test_budget_exceeded(self):
        builder = ProgramBuilder(max_blocks=2)
        builder.add(BlockType.RIGHT)
        builder.add(BlockType.RIGHT)

        assert builder.is_full
        assert builder.remaining == 0
        with pytest.raises(BlockBudgetExceeded) as exc_info:
            builder.add(BlockType.RIGHT)
        assert exc_info.value.max_blocks == 2
        assert len(builder.blocks) == 2

    def test_children_do_not_use_budget(self):
        builder = ProgramBuilder(max_blocks=1)
        builder.add(BlockType.LOOP)
        for _ in range(5):
            builder.add_child((0,), BlockType.RIGHT)
        assert builder.build().total_count() == 6

    def test_palette_enforced(self, first_level):
        builder = ProgramBuilder.for_level(first_level)
        with pytest.raises(ProgramValidationError):
            builder.add(BlockType.LOOP)

    def test_child_of_non_container(self):
        builder = ProgramBuilder()
        builder.add(BlockType.RIGHT)
        with pytest.raises(ProgramValidationError):
            builder.add_child((0,), BlockType.UP)

    def test_deep_edit_and_remove(self):
        builder = ProgramBuilder()
        builder.add(BlockType.LOOP)
        fn_path = builder.add_child((0,), BlockType.FUNCTION)
        builder.add_child(fn_path, BlockType.RIGHT)
        builder.add_child(fn_path, BlockType.WAIT)
        builder.configure(fn_path, name="StepAndRest")

        assert builder.get(fn_path).name == "StepAndRest"
        assert builder.remove_child(fn_path + (1,)) == Wait()
        assert builder.get(fn_path).body == (Move(Direction.RIGHT),)

    def test_build_rejects_bad_config(self):
        builder = ProgramBuilder()
        builder.add(BlockType.LOOP)
        builder.configure((0,), iterations=10)
        with pytest.raises(ProgramValidationError):
            builder.build()

    def test_clear(self):
        builder = ProgramBuilder(max_blocks=3)
        builder.add(BlockType.UP)
        builder.clear()
        assert builder.remaining == 3
