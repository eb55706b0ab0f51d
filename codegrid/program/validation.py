"""
Program Validation - Build-time checks for block programs.

Validates that:
1. Every node is a known block with well-formed configuration
   (loop count in range, known condition, known direction)
   and sits no deeper than MAX_NESTING_DEPTH
2. The top-level block count fits the level's budget
3. Only blocks unlocked for the level are used

Only top-level blocks count against the budget. Blocks nested inside
Loop/If/Function are free; levels are tuned around that.

The interpreter assumes a program that passed these checks.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable

from ..errors import ProgramValidationError
from .blocks import (
    BLOCK_CLASSES,
    MAX_LOOP_ITERATIONS,
    MAX_NESTING_DEPTH,
    MIN_LOOP_ITERATIONS,
    Block,
    BlockType,
    Condition,
    Direction,
    Function,
    If,
    Loop,
    Move,
    Program,
    is_container,
)


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def raise_if_invalid(self) -> None:
        if not self.valid:
            raise ProgramValidationError(self.errors)


def validate_program(
    program: Program,
    max_blocks: int | None = None,
    available_blocks: Iterable[BlockType] | None = None,
) -> ValidationResult:
    """
    Validate a program's structure, and optionally its fit to a level.

    Args:
        program: The program to check
        max_blocks: Top-level block budget, or None for no budget
        available_blocks: Block types the level allows, or None for all

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(program, Program):
        return ValidationResult(
            valid=False,
            errors=[f"Expected a Program, got {type(program).__name__}"],
        )

    if program.is_empty:
        warnings.append("Program is empty - nothing to run")

    allowed = set(available_blocks) if available_blocks is not None else None

    for idx, block in enumerate(program.blocks):
        errors.extend(_validate_block(block, (idx,), allowed, warnings))

    if max_blocks is not None and program.top_level_count > max_blocks:
        errors.append(
            f"Program uses {program.top_level_count} top-level blocks, "
            f"level allows {max_blocks}"
        )

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def validate_for_level(program: Program, level) -> ValidationResult:
    """Validate a program against a LevelDefinition's budget and palette."""
    return validate_program(
        program,
        max_blocks=level.max_blocks,
        available_blocks=level.available_blocks,
    )


def _validate_block(
    block: Block,
    path: tuple[int, ...],
    allowed: set[BlockType] | None,
    warnings: list[str],
) -> list[str]:
    """Validate a single block and, recursively, its children."""
    where = "/".join(str(i) for i in path)

    if not isinstance(block, BLOCK_CLASSES):
        return [f"Block {where}: not a block ({type(block).__name__})"]

    if len(path) > MAX_NESTING_DEPTH:
        return [f"Block {where}: nested deeper than {MAX_NESTING_DEPTH} levels"]

    errors = []

    if isinstance(block, Move) and not isinstance(block.direction, Direction):
        errors.append(f"Block {where}: unknown direction {block.direction!r}")
        # block_type is derived from the direction, skip the palette check
        return errors

    if allowed is not None and block.block_type not in allowed:
        errors.append(f"Block {where}: {block.block_type.value} is not available in this level")

    if isinstance(block, Loop):
        iterations = block.iterations
        if isinstance(iterations, bool) or not isinstance(iterations, int):
            errors.append(f"Loop {where}: iterations must be an integer, got {iterations!r}")
        elif not MIN_LOOP_ITERATIONS <= iterations <= MAX_LOOP_ITERATIONS:
            errors.append(
                f"Loop {where}: iterations must be between "
                f"{MIN_LOOP_ITERATIONS} and {MAX_LOOP_ITERATIONS}, got {iterations}"
            )

    if isinstance(block, If) and not isinstance(block.condition, Condition):
        errors.append(f"If {where}: unknown condition {block.condition!r}")

    if isinstance(block, Function) and not block.name:
        errors.append(f"Function {where}: name must not be empty")

    if is_container(block):
        if not block.body:
            warnings.append(f"{block.block_type.value} {where} has an empty body")
        for idx, child in enumerate(block.body):
            errors.extend(_validate_block(child, path + (idx,), allowed, warnings))

    return errors
