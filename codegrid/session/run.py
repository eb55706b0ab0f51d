"""
Run - The lifecycle of one program execution.

A run moves through:
    IDLE -> RUNNING -> FINISHED | CANCELLED

- IDLE: created, nothing executed yet
- RUNNING: the host is pulling trace events
- FINISHED: program completed (or a top-level Break stopped it);
  the outcome is available
- CANCELLED: the host gave up mid-run; no further events, no outcome

The event stream is lazy and NOT restartable. To replay a program,
start a new run; it gets fresh per-run state from the same World.
"""

from __future__ import annotations
from enum import Enum
from inspect import GEN_SUSPENDED, getgeneratorstate
from typing import Generator, Iterator
import logging
import time
import uuid

from ..engine_core.goal import GoalPredicate, reach_goal
from ..engine_core.interpreter import Interpreter, RunCancelled
from ..engine_core.trace import ExecutionOutcome, TraceEvent
from ..engine_core.world import World
from ..errors import EmptyProgramError, RunStateError
from ..program.blocks import Program
from ..program.validation import validate_program

logger = logging.getLogger(__name__)


class RunState(Enum):
    """State of a run."""
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({RunState.FINISHED, RunState.CANCELLED})


class RunHandle:
    """
    Host-side handle on a single run.

    Usage:
        handle = start_run(program, world)

        for event in handle.events():
            animate(event)          # host decides the pacing
            if user_pressed_reset:
                handle.cancel()     # stops before the next action

        if handle.outcome:
            show_verdict(handle.outcome)

    Or pull one event at a time with step(), which returns None once
    the run is over.
    """

    def __init__(
        self,
        program: Program,
        world: World,
        goal: GoalPredicate = reach_goal,
        run_id: str | None = None,
    ):
        self.run_id = run_id or str(uuid.uuid4())
        self.program = program
        self.world = world
        self.goal = goal

        self.state = RunState.IDLE
        self.trace: list[TraceEvent] = []
        self.created_at = time.time()
        self.finished_at: float | None = None

        self._cancel_requested = False
        self._outcome: ExecutionOutcome | None = None
        self._steps: Generator[TraceEvent, None, ExecutionOutcome] | None = None

    @property
    def outcome(self) -> ExecutionOutcome | None:
        """The outcome once FINISHED, otherwise None."""
        if self.state is RunState.FINISHED:
            return self._outcome
        return None

    def require_outcome(self) -> ExecutionOutcome:
        if self.state is not RunState.FINISHED:
            raise RunStateError(f"Run {self.run_id} has no outcome (state: {self.state.value})")
        return self._outcome

    @property
    def is_active(self) -> bool:
        return self.state not in TERMINAL_STATES

    def start(self) -> None:
        """IDLE -> RUNNING."""
        if self.state is not RunState.IDLE:
            raise RunStateError(
                f"Run {self.run_id} already started (state: {self.state.value}); "
                "start a new run to replay"
            )
        interpreter = Interpreter(
            world=self.world,
            program=self.program,
            goal=self.goal,
            cancel_requested=lambda: self._cancel_requested,
        )
        self._steps = interpreter.execute()
        self.state = RunState.RUNNING
        logger.debug("Run %s started", self.run_id)

    def step(self) -> TraceEvent | None:
        """
        Advance by one atomic action.

        Starts the run if it is IDLE. Returns the event, or None when the
        run has finished or was cancelled.
        """
        if self.state is RunState.IDLE:
            self.start()
        if self.state is not RunState.RUNNING:
            return None

        try:
            event = next(self._steps)
        except StopIteration as stop:
            self._finish(stop.value)
            return None
        except RunCancelled:
            self._mark_cancelled()
            return None

        self.trace.append(event)
        return event

    def events(self) -> Iterator[TraceEvent]:
        """
        Start the run and return its lazy event stream.

        Can only be called on an IDLE run.
        """
        self.start()
        return self._pump()

    def _pump(self) -> Iterator[TraceEvent]:
        while True:
            event = self.step()
            if event is None:
                return
            yield event

    def run_to_end(self) -> ExecutionOutcome | None:
        """Drain all remaining events. Returns the outcome, or None if cancelled."""
        while self.step() is not None:
            pass
        return self.outcome

    def cancel(self) -> bool:
        """
        Request cancellation.

        Takes effect before the next atomic action. Returns False if the
        run had already finished or been cancelled.
        """
        if not self.is_active:
            return False
        self._cancel_requested = True
        if self._steps is not None and getgeneratorstate(self._steps) == GEN_SUSPENDED:
            self._steps.close()
        self._mark_cancelled()
        return True

    def _finish(self, outcome: ExecutionOutcome) -> None:
        self._outcome = outcome
        self.state = RunState.FINISHED
        self.finished_at = time.time()
        logger.debug("Run %s finished after %d events", self.run_id, len(self.trace))

    def _mark_cancelled(self) -> None:
        self.state = RunState.CANCELLED
        self.finished_at = time.time()
        logger.info("Run %s cancelled after %d events", self.run_id, len(self.trace))


def start_run(
    program: Program,
    world: World,
    goal: GoalPredicate = reach_goal,
    run_id: str | None = None,
) -> RunHandle:
    """
    Create an IDLE run for a program.

    Raises:
        EmptyProgramError: the program has no blocks
        ProgramValidationError: the program is malformed
    """
    if program.is_empty:
        raise EmptyProgramError()
    validate_program(program).raise_if_invalid()
    return RunHandle(program=program, world=world, goal=goal, run_id=run_id)


def cancel(handle: RunHandle) -> bool:
    return handle.cancel()


def outcome(handle: RunHandle) -> ExecutionOutcome | None:
    return handle.outcome
