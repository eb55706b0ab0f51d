"""
World Model - Immutable grid description plus per-run mutable state.

A World is built once per level (by the level catalog or a test) and is
never mutated by a run. Everything a run changes lives in:
- ActorState: where the robot currently is
- CollectibleSet: which collectibles have been picked up

Both are created fresh at the start of every run, so re-running a program
always starts from the level's initial state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from ..errors import WorldValidationError
from ..program.blocks import Direction


class CollectibleKind(Enum):
    """Kinds of items that can be picked up."""
    COIN = "coin"
    GEM = "gem"
    KEY = "key"


@dataclass(frozen=True, order=True)
class Position:
    """A grid cell. (0, 0) is the top-left corner."""
    x: int
    y: int

    def step(self, direction: Direction) -> Position:
        """Return the neighbouring cell in the given direction."""
        dx, dy = direction.delta
        return Position(self.x + dx, self.y + dy)

    def as_tuple(self) -> tuple[int, int]:
        return (self.x, self.y)

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


@dataclass(frozen=True)
class Collectible:
    """An item placed on the grid by the level."""
    position: Position
    kind: CollectibleKind = CollectibleKind.COIN


@dataclass(frozen=True)
class World:
    """
    Immutable description of a level's grid.

    Invariants (checked on construction):
    - grid_size >= 1
    - start, goal and every collectible are inside the grid
    - none of them sit on a wall
    - they all occupy distinct cells, except that a collectible may
      lie on the start cell
    """
    grid_size: int
    start: Position
    goal: Position
    walls: frozenset[Position] = field(default_factory=frozenset)
    collectibles: tuple[Collectible, ...] = ()

    def __post_init__(self):
        # Accept any iterable from callers but store the immutable forms
        object.__setattr__(self, "walls", frozenset(self.walls))
        object.__setattr__(self, "collectibles", tuple(self.collectibles))

        errors = self._check_invariants()
        if errors:
            raise WorldValidationError(errors)

    def _check_invariants(self) -> list[str]:
        errors: list[str] = []
        if self.grid_size < 1:
            errors.append(f"grid_size must be >= 1, got {self.grid_size}")
            return errors

        for wall in self.walls:
            if not self.in_bounds(wall):
                errors.append(f"Wall {wall} is outside the grid")

        named = [("start", self.start), ("goal", self.goal)]
        named.extend(
            (f"collectible {i}", c.position) for i, c in enumerate(self.collectibles)
        )

        seen: dict[Position, str] = {}
        for name, pos in named:
            if not self.in_bounds(pos):
                errors.append(f"{name} {pos} is outside the grid")
            elif pos in self.walls:
                errors.append(f"{name} {pos} is on a wall")
            # An item may lie under the robot's starting cell
            if pos in seen and not (seen[pos] == "start" and name.startswith("collectible")):
                errors.append(f"{name} {pos} shares a cell with {seen[pos]}")
            else:
                seen[pos] = name

        return errors

    def in_bounds(self, pos: Position) -> bool:
        """Is the cell inside the grid?"""
        return 0 <= pos.x < self.grid_size and 0 <= pos.y < self.grid_size

    def is_wall(self, pos: Position) -> bool:
        return pos in self.walls

    def is_passable(self, pos: Position) -> bool:
        """False for out-of-grid cells and walls, True otherwise."""
        return self.in_bounds(pos) and not self.is_wall(pos)

    def new_actor(self) -> ActorState:
        """Fresh actor standing on the start cell."""
        return ActorState(position=self.start)

    def new_collectible_set(self) -> CollectibleSet:
        """Fresh collected-flags, nothing collected yet."""
        return CollectibleSet(
            items=self.collectibles,
            collected=[False] * len(self.collectibles),
        )


@dataclass
class ActorState:
    """The robot's position. Only the interpreter moves it."""
    position: Position


@dataclass
class CollectibleSet:
    """
    Per-run collected flags, ordered like World.collectibles.
    """
    items: tuple[Collectible, ...]
    collected: list[bool]

    def _index_at(self, pos: Position) -> int | None:
        for i, item in enumerate(self.items):
            if item.position == pos and not self.collected[i]:
                return i
        return None

    def collectible_at(self, pos: Position) -> Collectible | None:
        """The uncollected collectible at a cell, if any."""
        idx = self._index_at(pos)
        return self.items[idx] if idx is not None else None

    def collect(self, pos: Position) -> Collectible | None:
        """Mark the collectible at a cell as collected and return it."""
        idx = self._index_at(pos)
        if idx is None:
            return None
        self.collected[idx] = True
        return self.items[idx]

    def remaining(self) -> list[Collectible]:
        return [item for item, done in zip(self.items, self.collected) if not done]

    def all_collected(self) -> bool:
        return all(self.collected)

    @property
    def collected_count(self) -> int:
        return sum(self.collected)

    def snapshot(self) -> tuple[bool, ...]:
        """Immutable copy of the flags for trace events and outcomes."""
        return tuple(self.collected)
