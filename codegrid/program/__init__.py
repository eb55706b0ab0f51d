"""Block program schema - AST, validation, serialization and the editor builder."""

from .blocks import (
    Block,
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
    Wait,
    walk,
)
from .validation import ValidationResult, validate_program, validate_for_level
from .serialization import (
    block_to_dict,
    dumps_program,
    loads_program,
    parse_block,
    parse_program,
    program_to_data,
)
from .builder import ProgramBuilder, new_block

__all__ = [
    "Block",
    "BlockType",
    "Break",
    "Collect",
    "Condition",
    "Direction",
    "Function",
    "If",
    "Loop",
    "Move",
    "Program",
    "Wait",
    "walk",
    "ValidationResult",
    "validate_program",
    "validate_for_level",
    "block_to_dict",
    "dumps_program",
    "loads_program",
    "parse_block",
    "parse_program",
    "program_to_data",
    "ProgramBuilder",
    "new_block",
]
