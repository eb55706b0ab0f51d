"""
Program Builder - Editor-side assembly of block programs.

The builder is what the block palette talks to. It:
- Creates blocks with the palette defaults (LOOP 2x, IF ITEM_HERE)
- Enforces the level's top-level block budget on every add
- Refuses block types the level has not unlocked
- Edits nested children by index path

Nested children never count against the budget.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Iterable

from ..errors import BlockBudgetExceeded, ProgramValidationError
from .blocks import (
    DEFAULT_FUNCTION_NAME,
    MIN_LOOP_ITERATIONS,
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
    is_container,
)
from .validation import validate_program


def new_block(block_type: BlockType) -> Block:
    """Create a block with the palette's default configuration."""
    if block_type in MOVE_TYPES:
        return Move(MOVE_TYPES[block_type])
    if block_type == BlockType.COLLECT:
        return Collect()
    if block_type == BlockType.WAIT:
        return Wait()
    if block_type == BlockType.BREAK:
        return Break()
    if block_type == BlockType.LOOP:
        return Loop(iterations=MIN_LOOP_ITERATIONS)
    if block_type == BlockType.IF:
        return If(condition=Condition.ITEM_HERE)
    if block_type == BlockType.FUNCTION:
        return Function(name=DEFAULT_FUNCTION_NAME)
    raise ValueError(f"Unknown block type: {block_type}")


class ProgramBuilder:
    """
    Mutable program under construction.

    Usage:
        builder = ProgramBuilder(max_blocks=8)
        loop_idx = builder.add(BlockType.LOOP)
        builder.configure((loop_idx,), iterations=4)
        builder.add_child((loop_idx,), BlockType.RIGHT)
        program = builder.build()
    """

    def __init__(
        self,
        max_blocks: int | None = None,
        available_blocks: Iterable[BlockType] | None = None,
    ):
        self.max_blocks = max_blocks
        self.available_blocks = (
            frozenset(available_blocks) if available_blocks is not None else None
        )
        self._blocks: list[Block] = []

    @classmethod
    def for_level(cls, level) -> ProgramBuilder:
        """Builder limited by a LevelDefinition's budget and palette."""
        return cls(max_blocks=level.max_blocks, available_blocks=level.available_blocks)

    @property
    def blocks(self) -> tuple[Block, ...]:
        return tuple(self._blocks)

    @property
    def remaining(self) -> int | None:
        """Top-level slots left, or None when unlimited."""
        if self.max_blocks is None:
            return None
        return max(0, self.max_blocks - len(self._blocks))

    @property
    def is_full(self) -> bool:
        return self.max_blocks is not None and len(self._blocks) >= self.max_blocks

    def add(self, block: Block | BlockType) -> int:
        """
        Append a top-level block.

        Returns the new block's index.
        Raises BlockBudgetExceeded when the budget is used up.
        """
        block = self._coerce(block)
        if self.is_full:
            raise BlockBudgetExceeded(self.max_blocks)
        self._blocks.append(block)
        return len(self._blocks) - 1

    def remove(self, index: int) -> Block:
        return self._blocks.pop(index)

    def clear(self) -> None:
        self._blocks.clear()

    def add_child(self, parent_path: tuple[int, ...], block: Block | BlockType) -> tuple[int, ...]:
        """Append a child to the container at parent_path. Returns the child's path."""
        block = self._coerce(block)
        parent = self.get(parent_path)
        if not is_container(parent):
            raise ProgramValidationError(
                [f"Block {_fmt(parent_path)} ({parent.block_type.value}) cannot hold children"]
            )
        self._replace(parent_path, replace(parent, body=parent.body + (block,)))
        return parent_path + (len(parent.body),)

    def remove_child(self, path: tuple[int, ...]) -> Block:
        if len(path) < 2:
            return self.remove(path[0])
        parent_path, idx = path[:-1], path[-1]
        parent = self.get(parent_path)
        removed = parent.body[idx]
        new_body = parent.body[:idx] + parent.body[idx + 1:]
        self._replace(parent_path, replace(parent, body=new_body))
        return removed

    def configure(self, path: tuple[int, ...], **updates) -> Block:
        """
        Change a block's settings, e.g. iterations=4 or condition=Condition.WALL_AHEAD.
        """
        block = self.get(path)
        updated = replace(block, **updates)
        self._replace(path, updated)
        return updated

    def get(self, path: tuple[int, ...]) -> Block:
        if not path:
            raise IndexError("Empty block path")
        block = self._blocks[path[0]]
        for idx in path[1:]:
            if not is_container(block):
                raise IndexError(f"Block path {_fmt(path)} goes through a non-container")
            block = block.body[idx]
        return block

    def build(self) -> Program:
        """
        Freeze the current blocks into a Program.

        Raises ProgramValidationError if the program is malformed.
        """
        program = Program(blocks=tuple(self._blocks))
        validate_program(
            program,
            max_blocks=self.max_blocks,
            available_blocks=self.available_blocks,
        ).raise_if_invalid()
        return program

    def _coerce(self, block: Block | BlockType) -> Block:
        if isinstance(block, BlockType):
            block = new_block(block)
        if self.available_blocks is not None and block.block_type not in self.available_blocks:
            raise ProgramValidationError(
                [f"{block.block_type.value} is not available in this level"]
            )
        return block

    def _replace(self, path: tuple[int, ...], new: Block) -> None:
        """Swap the block at path, rebuilding the frozen ancestors."""
        if len(path) == 1:
            self._blocks[path[0]] = new
            return
        parent_path, idx = path[:-1], path[-1]
        parent = self.get(parent_path)
        body = list(parent.body)
        body[idx] = new
        self._replace(parent_path, replace(parent, body=tuple(body)))


def _fmt(path: tuple[int, ...]) -> str:
    return "/".join(str(i) for i in path)
