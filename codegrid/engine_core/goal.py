"""
Goal Evaluator - Decides whether a finished run solved the level.

A level supplies a goal predicate:
- reach_goal: the robot ends on the goal cell (default)
- collect_all_then_goal: every collectible picked up AND on the goal cell

Any callable with the same signature works as a custom predicate.
Failures carry a structured reason so the host can explain what went wrong.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Union

from .world import Collectible, CollectibleSet, Position, World


GoalPredicate = Callable[[Position, CollectibleSet, World], bool]


def requires_all_collected(predicate: GoalPredicate) -> GoalPredicate:
    """Mark a predicate as one that fails while collectibles remain."""
    predicate.requires_collectibles = True
    return predicate


def reach_goal(position: Position, collectibles: CollectibleSet, world: World) -> bool:
    return position == world.goal


@requires_all_collected
def collect_all_then_goal(position: Position, collectibles: CollectibleSet, world: World) -> bool:
    return collectibles.all_collected() and position == world.goal


@dataclass(frozen=True)
class PositionMismatch:
    """The robot stopped somewhere other than the goal."""
    actual: Position
    expected: Position

    @property
    def code(self) -> str:
        return "POSITION_MISMATCH"

    @property
    def message(self) -> str:
        return f"You ended at {self.actual}, but the goal is at {self.expected}"


@dataclass(frozen=True)
class MissingCollectibles:
    """Items were left on the grid."""
    remaining: tuple[Collectible, ...]
    total: int = 0

    @property
    def code(self) -> str:
        return "MISSING_COLLECTIBLES"

    @property
    def message(self) -> str:
        return f"You need to collect all {self.total} items before reaching the goal!"


FailureReason = Union[PositionMismatch, MissingCollectibles]


@dataclass(frozen=True)
class GoalResult:
    """Verdict of a goal predicate, with a reason on failure."""
    success: bool
    failure: FailureReason | None = None

    @classmethod
    def passed(cls) -> GoalResult:
        return cls(success=True)

    @classmethod
    def failed(cls, reason: FailureReason) -> GoalResult:
        return cls(success=False, failure=reason)

    @property
    def message(self) -> str:
        if self.success:
            return "Goal reached!"
        return self.failure.message


def evaluate_goal(
    predicate: GoalPredicate,
    position: Position,
    collectibles: CollectibleSet,
    world: World,
) -> GoalResult:
    """
    Run the level's predicate on the terminal state.

    Pure: reads the state, never changes it. When the predicate fails,
    missing items are reported ahead of a wrong position if the predicate
    cares about items or the robot is already standing on the goal.
    """
    if predicate(position, collectibles, world):
        return GoalResult.passed()

    remaining = tuple(collectibles.remaining())
    wants_items = getattr(predicate, "requires_collectibles", False)
    if remaining and (wants_items or position == world.goal):
        return GoalResult.failed(
            MissingCollectibles(remaining=remaining, total=len(collectibles.items))
        )

    return GoalResult.failed(PositionMismatch(actual=position, expected=world.goal))
