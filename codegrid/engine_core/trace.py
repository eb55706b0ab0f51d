"""
Trace - Events emitted by a run and the final outcome.

Every atomic action the interpreter performs produces exactly one
TraceEvent. The host animates events in order; nothing in an event
refers back to mutable engine state.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..program.blocks import Direction
from .world import Collectible, Position

if TYPE_CHECKING:
    from .goal import GoalResult


class TraceKind(Enum):
    """Kinds of atomic actions."""
    MOVED = "moved"
    BLOCKED = "blocked"  # Move into a wall or off the grid
    COLLECTED = "collected"
    WAITED = "waited"
    BROKE = "broke"


@dataclass(frozen=True)
class TraceEvent:
    """
    One host-visible step of a run.

    sequence is 0-based and gapless within a run.
    block_path locates the block that produced the event, as child
    indices from the top of the program.
    """
    sequence: int
    kind: TraceKind
    actor_pos: Position
    collectibles_snapshot: tuple[bool, ...]
    block_path: tuple[int, ...] = ()

    # Move details (MOVED and BLOCKED)
    direction: Direction | None = None
    target: Position | None = None  # Cell the move tried to enter

    # COLLECTED details
    collectible: Collectible | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "kind": self.kind.value,
            "actor_pos": self.actor_pos.as_tuple(),
            "collectibles": list(self.collectibles_snapshot),
            "block_path": list(self.block_path),
            "direction": self.direction.value if self.direction else None,
            "target": self.target.as_tuple() if self.target else None,
            "collectible": (
                {"pos": self.collectible.position.as_tuple(), "kind": self.collectible.kind.value}
                if self.collectible else None
            ),
        }

    def describe(self) -> str:
        """Human-readable line for logs and the CLI."""
        if self.kind == TraceKind.MOVED:
            return f"moved {self.direction.value} to {self.actor_pos}"
        if self.kind == TraceKind.BLOCKED:
            return f"blocked moving {self.direction.value} from {self.actor_pos} to {self.target}"
        if self.kind == TraceKind.COLLECTED:
            return f"collected {self.collectible.kind.value} at {self.actor_pos}"
        if self.kind == TraceKind.WAITED:
            return f"waited at {self.actor_pos}"
        return f"break at {self.actor_pos}"


@dataclass(frozen=True)
class ExecutionOutcome:
    """
    Result of a finished run.

    Only produced when the run reaches FINISHED; a cancelled run has
    no outcome.
    """
    final_position: Position
    collected: tuple[bool, ...]
    terminated_early: bool  # A Break escaped every Loop and stopped the program
    goal: GoalResult
    steps: int = 0

    @property
    def success(self) -> bool:
        return self.goal.success

    @property
    def collected_count(self) -> int:
        return sum(self.collected)
