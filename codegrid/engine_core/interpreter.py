"""
Interpreter - Tree-walking execution of block programs.

The interpreter is the single point of run-state mutation. It walks the
block tree against a World and yields one TraceEvent per atomic action:
a move (or blocked move), a collection, a wait tick, or a break.

Design principles:
- Generator-driven: the host pulls events and controls pacing
- Deterministic: same program + same world = same events and outcome
- Soft failures: blocked moves and empty cells never raise
- Explicit break signal: every block returns CONTINUE or BROKE, and only
  a Loop turns BROKE back into CONTINUE

A Break that is not inside any Loop travels up through If/Function
wrappers to the top level, where it stops the rest of the program.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generator
import logging

from ..errors import CodegridError
from ..program.blocks import (
    Block,
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
from .goal import GoalPredicate, evaluate_goal, reach_goal
from .trace import ExecutionOutcome, TraceEvent, TraceKind
from .world import ActorState, CollectibleSet, Position, World

logger = logging.getLogger(__name__)


class BreakSignal(Enum):
    """What a block tells its parent after it ran."""
    CONTINUE = "continue"
    BROKE = "broke"


class RunCancelled(CodegridError):
    """Raised inside the interpreter when the host cancelled the run."""


# Generator type every block handler returns
Steps = Generator[TraceEvent, None, BreakSignal]


def _never_cancelled() -> bool:
    return False


@dataclass
class Interpreter:
    """
    Executes one program against one world.

    Usage:
        interpreter = Interpreter(world, program)
        steps = interpreter.execute()
        for event in steps:
            animate(event)
        # outcome is the generator's return value, or use run_to_completion()

    An Interpreter can only be executed once; build a new one to re-run.
    """
    world: World
    program: Program
    goal: GoalPredicate = reach_goal
    cancel_requested: Callable[[], bool] = _never_cancelled

    # Per-run state, created in execute()
    actor: ActorState | None = field(default=None, init=False)
    collectibles: CollectibleSet | None = field(default=None, init=False)
    _sequence: int = field(default=0, init=False)
    _started: bool = field(default=False, init=False)
    _handlers: dict = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self._handlers = {
            Move: self._execute_move,
            Collect: self._execute_collect,
            Wait: self._execute_wait,
            Break: self._execute_break,
            Loop: self._execute_loop,
            If: self._execute_if,
            Function: self._execute_function,
        }

    def execute(self) -> Generator[TraceEvent, None, ExecutionOutcome]:
        """
        Run the program, yielding trace events.

        Returns (via StopIteration.value) the ExecutionOutcome.
        Raises RunCancelled when cancel_requested() turns true before an action.
        """
        if self._started:
            raise CodegridError("Interpreter already executed - create a new one to re-run")
        self._started = True

        self.actor = self.world.new_actor()
        self.collectibles = self.world.new_collectible_set()
        self._sequence = 0

        logger.debug(
            "Run started: %d top-level blocks, start=%s goal=%s",
            self.program.top_level_count, self.world.start, self.world.goal,
        )

        signal = BreakSignal.CONTINUE
        for idx, block in enumerate(self.program.blocks):
            signal = yield from self._execute_block(block, (idx,))
            if signal is BreakSignal.BROKE:
                logger.debug("Break escaped block %d, stopping program", idx)
                break

        terminated_early = signal is BreakSignal.BROKE
        result = evaluate_goal(
            self.goal, self.actor.position, self.collectibles, self.world
        )

        logger.info(
            "Run finished: success=%s position=%s collected=%d/%d steps=%d early=%s",
            result.success,
            self.actor.position,
            self.collectibles.collected_count,
            len(self.collectibles.items),
            self._sequence,
            terminated_early,
        )

        return ExecutionOutcome(
            final_position=self.actor.position,
            collected=self.collectibles.snapshot(),
            terminated_early=terminated_early,
            goal=result,
            steps=self._sequence,
        )

    # =========================================================================
    # Block dispatch
    # =========================================================================

    def _execute_block(self, block: Block, path: tuple[int, ...]) -> Steps:
        handler = self._get_handler(block)
        if handler is None:
            raise CodegridError(f"No handler for block {type(block).__name__} at {path}")
        return (yield from handler(block, path))

    def _get_handler(self, block: Block):
        return self._handlers.get(type(block))

    def _execute_sequence(self, body: tuple[Block, ...], path: tuple[int, ...]) -> Steps:
        """Run blocks in order, stopping at the first BROKE."""
        for idx, child in enumerate(body):
            signal = yield from self._execute_block(child, path + (idx,))
            if signal is BreakSignal.BROKE:
                return BreakSignal.BROKE
        return BreakSignal.CONTINUE

    # =========================================================================
    # Commands
    # =========================================================================

    def _execute_move(self, block: Move, path: tuple[int, ...]) -> Steps:
        self._check_cancelled()
        current = self.actor.position
        target = current.step(block.direction)

        if not self.world.is_passable(target):
            logger.debug("Blocked: %s -> %s", current, target)
            yield self._event(TraceKind.BLOCKED, path, direction=block.direction, target=target)
            return BreakSignal.CONTINUE

        self.actor.position = target
        yield self._event(TraceKind.MOVED, path, direction=block.direction, target=target)
        return BreakSignal.CONTINUE

    def _execute_collect(self, block: Collect, path: tuple[int, ...]) -> Steps:
        self._check_cancelled()
        item = self.collectibles.collect(self.actor.position)
        if item is not None:
            yield self._event(TraceKind.COLLECTED, path, collectible=item)
        return BreakSignal.CONTINUE

    def _execute_wait(self, block: Wait, path: tuple[int, ...]) -> Steps:
        self._check_cancelled()
        yield self._event(TraceKind.WAITED, path)
        return BreakSignal.CONTINUE

    def _execute_break(self, block: Break, path: tuple[int, ...]) -> Steps:
        self._check_cancelled()
        yield self._event(TraceKind.BROKE, path)
        return BreakSignal.BROKE

    # =========================================================================
    # Containers
    # =========================================================================

    def _execute_loop(self, block: Loop, path: tuple[int, ...]) -> Steps:
        """Repeat the body; a Break inside ends this loop only."""
        for _ in range(block.iterations):
            signal = yield from self._execute_sequence(block.body, path)
            if signal is BreakSignal.BROKE:
                break
        return BreakSignal.CONTINUE

    def _execute_if(self, block: If, path: tuple[int, ...]) -> Steps:
        """Run the body when the condition holds. Breaks pass through."""
        if not self.check_condition(block.condition):
            return BreakSignal.CONTINUE
        return (yield from self._execute_sequence(block.body, path))

    def _execute_function(self, block: Function, path: tuple[int, ...]) -> Steps:
        """Run the body in place. Breaks pass through."""
        return (yield from self._execute_sequence(block.body, path))

    def check_condition(self, condition: Condition) -> bool:
        """
        Evaluate an If condition against the current state.

        WALL_AHEAD and GOAL_AHEAD always look at the cell above the robot
        (y - 1), whatever direction it last moved. The edge of the grid
        is not a wall.
        """
        position = self.actor.position
        if condition == Condition.ITEM_HERE:
            return self.collectibles.collectible_at(position) is not None

        north = Position(position.x, position.y - 1)
        if condition == Condition.WALL_AHEAD:
            return self.world.is_wall(north)
        if condition == Condition.GOAL_AHEAD:
            return north == self.world.goal

        raise CodegridError(f"Unknown condition: {condition!r}")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _check_cancelled(self) -> None:
        if self.cancel_requested():
            logger.debug("Run cancelled before step %d", self._sequence)
            raise RunCancelled("Run cancelled")

    def _event(self, kind: TraceKind, path: tuple[int, ...], **details) -> TraceEvent:
        event = TraceEvent(
            sequence=self._sequence,
            kind=kind,
            actor_pos=self.actor.position,
            collectibles_snapshot=self.collectibles.snapshot(),
            block_path=path,
            **details,
        )
        self._sequence += 1
        return event


def run_to_completion(
    program: Program,
    world: World,
    goal: GoalPredicate = reach_goal,
) -> tuple[list[TraceEvent], ExecutionOutcome]:
    """
    Convenience function to run a program without pacing.

    Creates an Interpreter, drains its events and returns them with the outcome.
    """
    interpreter = Interpreter(world=world, program=program, goal=goal)
    steps = interpreter.execute()
    events: list[TraceEvent] = []
    while True:
        try:
            events.append(next(steps))
        except StopIteration as stop:
            return events, stop.value
