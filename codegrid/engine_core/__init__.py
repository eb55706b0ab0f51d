"""
Engine Core - Deterministic execution of block programs on a grid.

The engine is the runtime that:
1. Takes an immutable World and a validated Program
2. Creates fresh per-run state (robot position, collected flags)
3. Walks the block tree, yielding one TraceEvent per atomic action
4. Evaluates the level's goal predicate once the program ends
"""

from .world import (
    ActorState,
    Collectible,
    CollectibleKind,
    CollectibleSet,
    Position,
    World,
)
from .trace import ExecutionOutcome, TraceEvent, TraceKind
from .goal import (
    GoalPredicate,
    GoalResult,
    MissingCollectibles,
    PositionMismatch,
    collect_all_then_goal,
    evaluate_goal,
    reach_goal,
)
from .interpreter import BreakSignal, Interpreter, RunCancelled, run_to_completion

__all__ = [
    "ActorState",
    "Collectible",
    "CollectibleKind",
    "CollectibleSet",
    "Position",
    "World",
    "ExecutionOutcome",
    "TraceEvent",
    "TraceKind",
    "GoalPredicate",
    "GoalResult",
    "MissingCollectibles",
    "PositionMismatch",
    "collect_all_then_goal",
    "evaluate_goal",
    "reach_goal",
    "BreakSignal",
    "Interpreter",
    "RunCancelled",
    "run_to_completion",
]
