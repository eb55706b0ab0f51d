"""
Block AST - The program tree assembled in the block editor.

Blocks are:
- Tagged: every block carries a BlockType
- Immutable: frozen dataclasses, children held in tuples
- Owned: a container block exclusively owns its children, so a program
  is always a tree

There is no call-by-name construct. A Function block is an inline macro
whose body runs where it is placed, which rules out recursion.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Union


MIN_LOOP_ITERATIONS = 2
MAX_LOOP_ITERATIONS = 6
MAX_NESTING_DEPTH = 16
DEFAULT_FUNCTION_NAME = "MyFunction"


class Direction(Enum):
    """Movement directions. Screen coordinates: y grows downward."""
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"

    @property
    def delta(self) -> tuple[int, int]:
        return _DELTAS[self]


_DELTAS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


class BlockType(Enum):
    """Block kinds, named as the editor palette names them."""
    # Commands
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    COLLECT = "COLLECT"
    WAIT = "WAIT"
    BREAK = "BREAK"

    # Containers
    LOOP = "LOOP"
    IF = "IF"
    FUNCTION = "FUNCTION"

    @property
    def is_container(self) -> bool:
        return self in CONTAINER_TYPES


CONTAINER_TYPES = frozenset({BlockType.LOOP, BlockType.IF, BlockType.FUNCTION})

MOVE_TYPES = {
    BlockType.UP: Direction.UP,
    BlockType.DOWN: Direction.DOWN,
    BlockType.LEFT: Direction.LEFT,
    BlockType.RIGHT: Direction.RIGHT,
}


class Condition(Enum):
    """Conditions an If block can test."""
    ITEM_HERE = "ITEM_HERE"
    WALL_AHEAD = "WALL_AHEAD"
    GOAL_AHEAD = "GOAL_AHEAD"


@dataclass(frozen=True)
class Move:
    """Step one cell in a direction."""
    direction: Direction

    @property
    def block_type(self) -> BlockType:
        return BlockType(self.direction.value)


@dataclass(frozen=True)
class Collect:
    """Pick up the item on the current cell, if there is one."""

    @property
    def block_type(self) -> BlockType:
        return BlockType.COLLECT


@dataclass(frozen=True)
class Wait:
    """Pause for one tick."""

    @property
    def block_type(self) -> BlockType:
        return BlockType.WAIT


@dataclass(frozen=True)
class Break:
    """Leave the nearest enclosing Loop."""

    @property
    def block_type(self) -> BlockType:
        return BlockType.BREAK


@dataclass(frozen=True)
class Loop:
    """
    Repeat the body a fixed number of times.

    Examples:
    - Loop(4, (Move(Direction.RIGHT),))
    - Loop(3, (Move(Direction.RIGHT), Break()))
    """
    iterations: int
    body: tuple[Block, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "body", tuple(self.body))

    @property
    def block_type(self) -> BlockType:
        return BlockType.LOOP


@dataclass(frozen=True)
class If:
    """Run the body once if the condition holds when the block is reached."""
    condition: Condition
    body: tuple[Block, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "body", tuple(self.body))

    @property
    def block_type(self) -> BlockType:
        return BlockType.IF


@dataclass(frozen=True)
class Function:
    """Named group of blocks, run in place."""
    body: tuple[Block, ...] = ()
    name: str = DEFAULT_FUNCTION_NAME

    def __post_init__(self):
        object.__setattr__(self, "body", tuple(self.body))

    @property
    def block_type(self) -> BlockType:
        return BlockType.FUNCTION


Block = Union[Move, Collect, Wait, Break, Loop, If, Function]
ContainerBlock = Union[Loop, If, Function]

BLOCK_CLASSES = (Move, Collect, Wait, Break, Loop, If, Function)


def is_container(block: Block) -> bool:
    return isinstance(block, (Loop, If, Function))


@dataclass(frozen=True)
class Program:
    """
    An ordered top-level sequence of blocks.

    Only the top-level length counts against a level's block budget.
    """
    blocks: tuple[Block, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "blocks", tuple(self.blocks))

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    @property
    def is_empty(self) -> bool:
        return len(self.blocks) == 0

    @property
    def top_level_count(self) -> int:
        return len(self.blocks)

    def total_count(self) -> int:
        """Every block in the tree, nested ones included."""
        return sum(1 for _ in walk(self.blocks))

    def block_types(self) -> set[BlockType]:
        return {block.block_type for _, block in walk(self.blocks)}


def walk(
    blocks: tuple[Block, ...], prefix: tuple[int, ...] = ()
) -> Iterator[tuple[tuple[int, ...], Block]]:
    """
    Depth-first walk yielding (path, block).

    The path is the tuple of child indices from the root to the block,
    e.g. (2, 0) is the first child of the third top-level block.
    """
    for idx, block in enumerate(blocks):
        path = prefix + (idx,)
        yield path, block
        if is_container(block):
            yield from walk(block.body, path)


# =============================================================================
# Shorthand constructors
# =============================================================================

def up() -> Move:
    return Move(Direction.UP)


def down() -> Move:
    return Move(Direction.DOWN)


def left() -> Move:
    return Move(Direction.LEFT)


def right() -> Move:
    return Move(Direction.RIGHT)
