"""
Program Serialization - Plain-dict form of block programs.

The editor, the HTTP API and the CLI exchange programs as JSON lists:

    [
        {"type": "RIGHT"},
        {"type": "LOOP", "value": 4, "children": [{"type": "UP"}]},
        {"type": "IF", "condition": "ITEM_HERE", "children": [{"type": "COLLECT"}]},
        {"type": "FUNCTION", "name": "StepRight", "children": [...]}
    ]

Field names follow the editor's block records ("value" is the loop count).
Parsing only checks shape; range checks belong to validation.
"""

from __future__ import annotations
import json
from typing import Any

from ..errors import ProgramValidationError
from .blocks import (
    DEFAULT_FUNCTION_NAME,
    MAX_NESTING_DEPTH,
    MOVE_TYPES,
    Block,
    BlockType,
    Break,
    Collect,
    Condition,
    Function,
    If,
    Loop,
    Move,
    Program,
    Wait,
)


def block_to_dict(block: Block) -> dict[str, Any]:
    """Convert a block (and its children) to a dictionary."""
    data: dict[str, Any] = {"type": block.block_type.value}
    if isinstance(block, Loop):
        data["value"] = block.iterations
    elif isinstance(block, If):
        data["condition"] = block.condition.value
    elif isinstance(block, Function):
        data["name"] = block.name
    if isinstance(block, (Loop, If, Function)):
        data["children"] = [block_to_dict(child) for child in block.body]
    return data


def program_to_data(program: Program) -> list[dict[str, Any]]:
    return [block_to_dict(block) for block in program.blocks]


def parse_block(data: dict[str, Any], path: str = "0", depth: int = 1) -> Block:
    """
    Parse a block from a dictionary.

    Args:
        data: Dictionary with "type" key and block-specific fields
        path: Position of the block, used in error messages
        depth: Nesting level of the block, 1 for a top-level block

    Returns:
        Typed Block object

    Raises:
        ValueError: If type is unknown, required fields are missing, or the
            block is nested deeper than MAX_NESTING_DEPTH
    """
    if depth > MAX_NESTING_DEPTH:
        raise ValueError(f"Block {path}: nested deeper than {MAX_NESTING_DEPTH} levels")

    if not isinstance(data, dict):
        raise ValueError(f"Block {path}: expected an object, got {type(data).__name__}")

    block_type = data.get("type")
    if not block_type:
        raise ValueError(f"Block {path}: missing 'type' field")

    try:
        btype = BlockType(str(block_type).upper())
    except ValueError:
        raise ValueError(f"Block {path}: unknown block type {block_type!r}")

    if btype in MOVE_TYPES:
        return Move(MOVE_TYPES[btype])
    elif btype == BlockType.COLLECT:
        return Collect()
    elif btype == BlockType.WAIT:
        return Wait()
    elif btype == BlockType.BREAK:
        return Break()

    children = _parse_children(data, path, depth)

    if btype == BlockType.LOOP:
        if "value" not in data:
            raise ValueError(f"Block {path}: LOOP needs a 'value' (iteration count)")
        value = data["value"]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Block {path}: LOOP 'value' must be an integer, got {value!r}")
        return Loop(iterations=value, body=children)
    elif btype == BlockType.IF:
        condition = data.get("condition")
        if condition is None:
            raise ValueError(f"Block {path}: IF needs a 'condition'")
        try:
            cond = Condition(str(condition).upper())
        except ValueError:
            raise ValueError(f"Block {path}: unknown condition {condition!r}")
        return If(condition=cond, body=children)
    elif btype == BlockType.FUNCTION:
        return Function(
            body=children,
            name=data.get("name") or data.get("functionName") or DEFAULT_FUNCTION_NAME,
        )
    else:
        raise ValueError(f"Block {path}: unhandled block type {btype}")


def _parse_children(data: dict[str, Any], path: str, depth: int) -> tuple[Block, ...]:
    children = data.get("children", [])
    if not isinstance(children, list):
        raise ValueError(f"Block {path}: 'children' must be a list")
    return tuple(
        parse_block(child, f"{path}/{idx}", depth + 1) for idx, child in enumerate(children)
    )


def parse_program(data: list[dict[str, Any]]) -> Program:
    """
    Parse a program from a list of block dictionaries.

    Raises:
        ProgramValidationError: If any block cannot be parsed
    """
    if not isinstance(data, list):
        raise ProgramValidationError(["Program must be a list of blocks"])

    blocks = []
    errors = []
    for idx, item in enumerate(data):
        try:
            blocks.append(parse_block(item, str(idx)))
        except ValueError as e:
            errors.append(str(e))

    if errors:
        raise ProgramValidationError(errors)
    return Program(blocks=tuple(blocks))


def loads_program(text: str) -> Program:
    """Parse a program from JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProgramValidationError([f"Invalid program JSON: {e}"])
    if isinstance(data, dict):
        data = data.get("program", data.get("blocks"))
    return parse_program(data)


def dumps_program(program: Program, indent: int | None = 2) -> str:
    return json.dumps(program_to_data(program), indent=indent)
